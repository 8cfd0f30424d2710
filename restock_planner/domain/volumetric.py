"""
Shipment geometry: cartons, volume (CBM) and weight from package dimensions.

Core calculations: deterministic, testable, no I/O.
"""
from dataclasses import dataclass
import math

from .currency import safe_divide


CM3_PER_CBM = 1_000_000

# Carrier volumetric divisors (cm³ per kg)
VOLUMETRIC_DIVISOR_STANDARD = 6000   # Air freight / most forwarders
VOLUMETRIC_DIVISOR_EXPRESS = 5000    # Express couriers
VALID_DIVISORS = (VOLUMETRIC_DIVISOR_STANDARD, VOLUMETRIC_DIVISOR_EXPRESS)
VALID_PRICING_UNITS = ("kg", "cbm")


def _non_negative(value: float) -> float:
    if not math.isfinite(value) or value < 0:
        return 0.0
    return value


@dataclass(frozen=True)
class Volumetrics:
    """Geometry-derived shipment figures."""
    total_cartons: int
    box_volume_cbm: float
    total_volume_cbm: float
    single_box_weight_kg: float
    total_weight_kg: float           # Actual gross weight (not volumetric)


@dataclass(frozen=True)
class FreightEstimate:
    """Quick freight quote comparing actual vs dimensional weight."""
    total_volume_cbm: float
    actual_weight_kg: float
    volumetric_weight_kg: float
    chargeable_weight_kg: float
    is_volumetric: bool              # True = bulky cargo billed by dimensions
    estimated_cost: float


class VolumetricCalculator:
    """Pure geometry calculator for a replenishment shipment."""

    @staticmethod
    def total_cartons(quantity: int, items_per_box: int, manual_cartons: int = 0) -> int:
        """
        Number of cartons needed.

        A positive manual count (entered from the packing list) wins over the
        derived ceil(quantity / items_per_box).

        Examples:
            >>> VolumetricCalculator.total_cartons(200, 50)
            4
            >>> VolumetricCalculator.total_cartons(42, 10)
            5
            >>> VolumetricCalculator.total_cartons(42, 0)
            0
        """
        if manual_cartons and manual_cartons > 0:
            return int(manual_cartons)
        if items_per_box <= 0 or quantity <= 0:
            return 0
        return math.ceil(quantity / items_per_box)

    @staticmethod
    def box_volume_cbm(length_cm: float, width_cm: float, height_cm: float) -> float:
        """Single carton volume in cubic meters."""
        volume_cm3 = _non_negative(length_cm) * _non_negative(width_cm) * _non_negative(height_cm)
        return safe_divide(volume_cm3, CM3_PER_CBM)

    @staticmethod
    def calculate(
        box_length_cm: float,
        box_width_cm: float,
        box_height_cm: float,
        items_per_box: int,
        quantity: int,
        unit_weight_kg: float,
        manual_cartons: int = 0,
    ) -> Volumetrics:
        """
        Derive cartons, volume and weight for a shipment.

        Args:
            box_length_cm, box_width_cm, box_height_cm: Carton dimensions
            items_per_box: Units per carton (0 = unknown packing)
            quantity: Units shipped
            unit_weight_kg: Gross weight per unit
            manual_cartons: Carton count override (0 = derive)

        Returns:
            Volumetrics with every field finite and non-negative
        """
        quantity = max(0, int(quantity))
        items_per_box = max(0, int(items_per_box))
        unit_weight_kg = _non_negative(unit_weight_kg)

        cartons = VolumetricCalculator.total_cartons(quantity, items_per_box, manual_cartons)
        box_cbm = VolumetricCalculator.box_volume_cbm(box_length_cm, box_width_cm, box_height_cm)

        # Products of large finite inputs can overflow; _non_negative maps inf to 0
        return Volumetrics(
            total_cartons=cartons,
            box_volume_cbm=box_cbm,
            total_volume_cbm=_non_negative(box_cbm * cartons),
            single_box_weight_kg=_non_negative(unit_weight_kg * items_per_box),
            total_weight_kg=_non_negative(unit_weight_kg * quantity),
        )


def estimate_freight(
    length_cm: float,
    width_cm: float,
    height_cm: float,
    unit_weight_kg: float,
    pieces: int,
    unit_price: float,
    unit: str = "kg",
    divisor: int = VOLUMETRIC_DIVISOR_STANDARD,
) -> FreightEstimate:
    """
    Chargeable-weight freight quote for *pieces* packages of the given size.

    Carriers bill the greater of actual weight and dimensional weight
    (L × W × H / divisor). Pricing can be per kg (chargeable weight) or per
    CBM (volume).

    Raises:
        ValueError: If unit is not "kg"/"cbm" or divisor is not 5000/6000
    """
    if unit not in VALID_PRICING_UNITS:
        raise ValueError(f"Invalid pricing unit: {unit}. Must be 'kg' or 'cbm'.")
    if divisor not in VALID_DIVISORS:
        raise ValueError(f"Invalid volumetric divisor: {divisor}. Must be 5000 or 6000.")

    pieces = max(0, int(pieces))
    volume_cm3 = _non_negative(_non_negative(length_cm) * _non_negative(width_cm) * _non_negative(height_cm) * pieces)
    total_cbm = safe_divide(volume_cm3, CM3_PER_CBM)
    volumetric_weight = safe_divide(volume_cm3, divisor)
    actual_weight = _non_negative(_non_negative(unit_weight_kg) * pieces)
    chargeable = max(actual_weight, volumetric_weight)

    price = _non_negative(unit_price)
    cost = _non_negative(chargeable * price if unit == "kg" else total_cbm * price)

    return FreightEstimate(
        total_volume_cbm=total_cbm,
        actual_weight_kg=actual_weight,
        volumetric_weight_kg=volumetric_weight,
        chargeable_weight_kg=chargeable,
        is_volumetric=volumetric_weight > actual_weight,
        estimated_cost=cost,
    )
