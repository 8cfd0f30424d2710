"""
Project configuration and constants.

Settings live in a JSON file owned by the caller; this module only turns
raw settings dicts into a validated AppSettings (normalize_settings) and
offers load/save helpers for the default location.
"""
import json
import logging
import math
import os
from pathlib import Path
from typing import Any, Dict, List, Optional, Union

from .domain.models import AppSettings, LogisticsTier, StockThresholds, WarehouseType
from .domain.validation import coerce_bool

logger = logging.getLogger(__name__)

# Default parameters (can be overridden via settings file)
DEFAULT_EXCHANGE_RATE = 7.3          # CNY per USD
DEFAULT_CRITICAL_DAYS = 15
DEFAULT_LOW_DAYS = 45
DEFAULT_OVERSTOCK_DAYS = 90
DEFAULT_LEAD_TIME_DAYS = 30          # Production + first leg
DEFAULT_SAFETY_STOCK_DAYS = 15
DEFAULT_TARGET_STOCK_DAYS = 90       # Restock plan coverage goal
DEFAULT_WAREHOUSE = WarehouseType.US_WEST
DEFAULT_FULFILLMENT_WAREHOUSE = WarehouseType.US_WEST

SETTINGS_FILENAME = "settings.json"
HOME_ENV_VAR = "RESTOCK_PLANNER_HOME"

PathLike = Union[str, Path]


def get_home_dir() -> Path:
    """$RESTOCK_PLANNER_HOME, else ~/.restock_planner."""
    override = os.environ.get(HOME_ENV_VAR)
    if override:
        return Path(override)
    return Path.home() / ".restock_planner"


def get_settings_path() -> Path:
    return get_home_dir() / SETTINGS_FILENAME


# ============================================================
# Normalization
# ============================================================

def _positive_float(raw: Any, default: Optional[float]) -> Optional[float]:
    try:
        value = float(raw)
    except (TypeError, ValueError):
        return default
    if not math.isfinite(value) or value <= 0:
        return default
    return value


def _normalize_tiers(raw_tiers: Any, label: str) -> List[LogisticsTier]:
    """Keep valid tiers (sorted by min_weight); log and drop the rest."""
    if not isinstance(raw_tiers, list):
        if raw_tiers is not None:
            logger.warning("%s tiers must be a list, got %r; ignoring", label, type(raw_tiers).__name__)
        return []

    tiers = []
    for raw in raw_tiers:
        try:
            tier = LogisticsTier(
                min_weight=float(raw.get("min_weight", raw.get("minWeight"))),
                max_weight=float(raw.get("max_weight", raw.get("maxWeight"))),
                price=float(raw["price"]),
            )
        except (AttributeError, KeyError, TypeError, ValueError) as e:
            logger.warning("Dropping invalid %s tier %r: %s", label, raw, e)
            continue
        tiers.append(tier)

    tiers.sort(key=lambda t: t.min_weight)
    for prev, cur in zip(tiers, tiers[1:]):
        if cur.min_weight < prev.max_weight:
            logger.warning("%s tiers overlap at %.2f kg; first match wins", label, cur.min_weight)
        elif cur.min_weight > prev.max_weight:
            logger.warning("%s tiers have a gap between %.2f and %.2f kg", label, prev.max_weight, cur.min_weight)
    return tiers


def _normalize_thresholds(raw: Any) -> StockThresholds:
    if not isinstance(raw, dict):
        return StockThresholds()
    try:
        return StockThresholds(
            critical_days=float(raw.get("critical_days", DEFAULT_CRITICAL_DAYS)),
            low_days=float(raw.get("low_days", DEFAULT_LOW_DAYS)),
            overstock_days=float(raw.get("overstock_days", DEFAULT_OVERSTOCK_DAYS)),
        )
    except (TypeError, ValueError) as e:
        logger.warning("Invalid stock thresholds %r (%s); using defaults", raw, e)
        return StockThresholds()


def _normalize_warehouse(raw: Any, default: WarehouseType) -> WarehouseType:
    if raw is None:
        return default
    try:
        return WarehouseType(raw)
    except ValueError:
        logger.warning("Unknown warehouse %r; using %s", raw, default.value)
        return default


def normalize_settings(raw: Optional[Dict[str, Any]]) -> AppSettings:
    """
    Validate and normalize a raw settings dict.

    Applies fallback defaults and drops invalid entries. Accepts both
    snake_case and the front-end's camelCase keys. Does not raise.

    Args:
        raw: Settings dict (may be empty or None)

    Returns:
        AppSettings
    """
    raw = raw or {}

    rate_raw = raw.get("exchange_rate", raw.get("exchangeRate", DEFAULT_EXCHANGE_RATE))
    exchange_rate = _positive_float(rate_raw, None)
    if exchange_rate is None:
        logger.warning("Invalid exchange rate %r; using %.2f", rate_raw, DEFAULT_EXCHANGE_RATE)
        exchange_rate = DEFAULT_EXCHANGE_RATE

    allow_negative = raw.get("allow_negative_balance", raw.get("allowNegativeBalance", True))

    return AppSettings(
        exchange_rate=exchange_rate,
        air_tiers=tuple(_normalize_tiers(raw.get("air_tiers", raw.get("airTiers")), "Air")),
        sea_tiers=tuple(_normalize_tiers(raw.get("sea_tiers", raw.get("seaTiers")), "Sea")),
        stock_thresholds=_normalize_thresholds(raw.get("stock_thresholds")),
        allow_negative_balance=coerce_bool(allow_negative),
        default_warehouse=_normalize_warehouse(raw.get("default_warehouse"), DEFAULT_WAREHOUSE),
        fulfillment_warehouse=_normalize_warehouse(raw.get("fulfillment_warehouse"), DEFAULT_FULFILLMENT_WAREHOUSE),
    )


# ============================================================
# Settings file
# ============================================================

def load_settings(path: Optional[PathLike] = None) -> AppSettings:
    """
    Load settings from JSON.

    Missing or unreadable files yield defaults.
    """
    settings_file = Path(path) if path is not None else get_settings_path()

    if not settings_file.exists():
        return normalize_settings({})

    try:
        with open(settings_file, "r", encoding="utf-8") as f:
            raw = json.load(f)
    except (json.JSONDecodeError, IOError) as e:
        logger.warning("Could not read settings %s: %s; using defaults", settings_file, e)
        return normalize_settings({})

    if not isinstance(raw, dict):
        logger.warning("Settings file %s does not hold an object; using defaults", settings_file)
        return normalize_settings({})

    return normalize_settings(raw)


def save_settings(settings: AppSettings, path: Optional[PathLike] = None) -> bool:
    """
    Write settings as JSON.

    Returns:
        True if successful, False otherwise
    """
    settings_file = Path(path) if path is not None else get_settings_path()
    try:
        settings_file.parent.mkdir(parents=True, exist_ok=True)
        with open(settings_file, "w", encoding="utf-8") as f:
            json.dump(settings.to_dict(), f, indent=2)
        return True
    except IOError as e:
        logger.error("Could not save settings %s: %s", settings_file, e)
        return False
