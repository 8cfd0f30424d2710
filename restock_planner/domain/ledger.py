"""
Multi-warehouse inventory ledger (event sourcing).

Balances are never stored: the balance of a (sku, warehouse) pair is the sum
of quantity_change over every matching log, replayed in log order. Replay is
a full O(n) fold per query, fine for the few thousand logs a seller keeps.
"""
from datetime import datetime
import logging
from typing import Dict, Iterable, List, Mapping, Optional, Sequence, Tuple
import uuid

from .models import InventoryLog, TransactionType, WarehouseType

logger = logging.getLogger(__name__)


class InsufficientStockError(ValueError):
    """Raised when an operation would push a warehouse balance below zero."""

    def __init__(self, sku: str, warehouse: WarehouseType, available: int, requested: int):
        self.sku = sku
        self.warehouse = warehouse
        self.available = available
        self.requested = requested
        super().__init__(
            f"Insufficient stock for {sku} at {warehouse.value}: "
            f"available {available}, requested {requested}"
        )


def _empty_balances() -> Dict[WarehouseType, int]:
    return {wh: 0 for wh in WarehouseType}


class BalanceCalculator:
    """
    Pure balance replay over a sequence of logs.

    Rule: balance(sku, warehouse) = Σ quantity_change of matching logs.
    Unknown sku/warehouse pairs have a zero balance.
    """

    @staticmethod
    def balance(sku: str, warehouse: WarehouseType, logs: Iterable[InventoryLog]) -> int:
        """Balance of one (sku, warehouse) pair."""
        return sum(
            log.quantity_change
            for log in logs
            if log.sku == sku and log.warehouse == warehouse
        )

    @staticmethod
    def balances(
        sku: str,
        logs: Iterable[InventoryLog],
        legacy_quantity: int = 0,
        default_warehouse: WarehouseType = WarehouseType.US_WEST,
    ) -> Dict[WarehouseType, int]:
        """
        Balance per warehouse for a SKU, every warehouse present.

        Legacy migration: a SKU that has no logs at all but carries a
        non-zero quantity on its planning record is reported as holding
        that quantity in *default_warehouse*. This is a read-time fallback;
        nothing is written, and it stops applying once the first log exists.

        Args:
            sku: SKU identifier
            logs: All ledger logs (any SKU)
            legacy_quantity: Quantity from the planning record
            default_warehouse: Where legacy stock is assumed to sit

        Returns:
            Dict {warehouse: balance}
        """
        result = _empty_balances()
        seen = False
        for log in logs:
            if log.sku != sku:
                continue
            seen = True
            result[log.warehouse] += log.quantity_change

        if not seen and legacy_quantity:
            result[default_warehouse] = int(legacy_quantity)

        return result

    @staticmethod
    def total(
        sku: str,
        logs: Iterable[InventoryLog],
        legacy_quantity: int = 0,
        default_warehouse: WarehouseType = WarehouseType.US_WEST,
    ) -> int:
        """Total units of a SKU across all warehouses."""
        return sum(BalanceCalculator.balances(sku, logs, legacy_quantity, default_warehouse).values())

    @staticmethod
    def all_skus(logs: Iterable[InventoryLog]) -> Dict[str, Dict[WarehouseType, int]]:
        """
        Balances for every SKU that appears in the logs.

        Returns:
            Dict {sku: {warehouse: balance}}
        """
        result: Dict[str, Dict[WarehouseType, int]] = {}
        for log in logs:
            per_sku = result.setdefault(log.sku, _empty_balances())
            per_sku[log.warehouse] += log.quantity_change
        return result


def get_balance(sku: str, warehouse: WarehouseType, logs: Iterable[InventoryLog]) -> int:
    return BalanceCalculator.balance(sku, warehouse, logs)


def get_balances(
    sku: str,
    logs: Iterable[InventoryLog],
    legacy_quantity: int = 0,
    default_warehouse: WarehouseType = WarehouseType.US_WEST,
) -> Dict[WarehouseType, int]:
    return BalanceCalculator.balances(sku, logs, legacy_quantity, default_warehouse)


def get_total_balance(
    sku: str,
    logs: Iterable[InventoryLog],
    legacy_quantity: int = 0,
    default_warehouse: WarehouseType = WarehouseType.US_WEST,
) -> int:
    return BalanceCalculator.total(sku, logs, legacy_quantity, default_warehouse)


def get_all_skus_balances(logs: Iterable[InventoryLog]) -> Dict[str, Dict[WarehouseType, int]]:
    return BalanceCalculator.all_skus(logs)


def _new_log_id() -> str:
    return f"LOG-{uuid.uuid4().hex[:12]}"


def _positive_qty(qty: int, what: str) -> int:
    if isinstance(qty, bool) or not isinstance(qty, int) or qty <= 0:
        raise ValueError(f"{what} quantity must be a positive integer, got {qty!r}")
    return qty


class InventoryLedger:
    """
    Append-only log collection with balance queries.

    Multi-log operations (transfers, order fulfillment) validate everything
    first and then append with a single list.extend(), so a reader never sees
    one half of a transfer.
    """

    def __init__(
        self,
        logs: Iterable[InventoryLog] = (),
        allow_negative_balance: bool = True,
        fulfillment_warehouse: WarehouseType = WarehouseType.US_WEST,
        default_warehouse: WarehouseType = WarehouseType.US_WEST,
    ):
        """
        Initialize ledger.

        Args:
            logs: Existing logs (e.g. loaded by the caller from storage)
            allow_negative_balance: If False, operations that would drive a
                balance below zero raise InsufficientStockError
            fulfillment_warehouse: Source warehouse for sales
            default_warehouse: Location assumed for legacy (pre-ledger) stock
        """
        self._logs: List[InventoryLog] = list(logs)
        self.allow_negative_balance = allow_negative_balance
        self.fulfillment_warehouse = fulfillment_warehouse
        self.default_warehouse = default_warehouse

    @classmethod
    def from_settings(cls, settings, logs: Iterable[InventoryLog] = ()) -> "InventoryLedger":
        """Build a ledger using the policy and warehouses from AppSettings."""
        return cls(
            logs=logs,
            allow_negative_balance=settings.allow_negative_balance,
            fulfillment_warehouse=settings.fulfillment_warehouse,
            default_warehouse=settings.default_warehouse,
        )

    @property
    def logs(self) -> Tuple[InventoryLog, ...]:
        """Read-only snapshot of all logs in append order."""
        return tuple(self._logs)

    def __len__(self) -> int:
        return len(self._logs)

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    def get_balance(self, sku: str, warehouse: WarehouseType) -> int:
        return BalanceCalculator.balance(sku, warehouse, self._logs)

    def get_all_balances(self, sku: str, legacy_quantity: int = 0) -> Dict[WarehouseType, int]:
        return BalanceCalculator.balances(sku, self._logs, legacy_quantity, self.default_warehouse)

    def get_total_balance(self, sku: str, legacy_quantity: int = 0) -> int:
        return BalanceCalculator.total(sku, self._logs, legacy_quantity, self.default_warehouse)

    def logs_for(self, sku: str) -> List[InventoryLog]:
        """Logs of one SKU, newest first (history view)."""
        # timestamp() lets naive local and parsed UTC ("...Z") dates sort together
        return sorted(
            (log for log in self._logs if log.sku == sku),
            key=lambda log: log.date.timestamp(),
            reverse=True,
        )

    # ------------------------------------------------------------------
    # Appends
    # ------------------------------------------------------------------

    def append_log(self, log: InventoryLog) -> None:
        """Append one log. Only the structural shape is checked."""
        if not isinstance(log, InventoryLog):
            raise TypeError(f"Expected InventoryLog, got {type(log).__name__}")
        self._check_policy([log])
        self._logs.append(log)

    def append_logs(self, logs: Sequence[InventoryLog]) -> None:
        """Append several logs as one unit: all of them or none."""
        batch = list(logs)
        for log in batch:
            if not isinstance(log, InventoryLog):
                raise TypeError(f"Expected InventoryLog, got {type(log).__name__}")
        self._check_policy(batch)
        self._logs.extend(batch)

    def _check_policy(self, batch: Sequence[InventoryLog]) -> None:
        """Reject a batch that would leave any touched balance negative."""
        if self.allow_negative_balance:
            return

        deltas: Dict[Tuple[str, WarehouseType], int] = {}
        for log in batch:
            key = (log.sku, log.warehouse)
            deltas[key] = deltas.get(key, 0) + log.quantity_change

        for (sku, warehouse), delta in deltas.items():
            if delta >= 0:
                continue
            available = self.get_balance(sku, warehouse)
            if available + delta < 0:
                logger.warning(
                    "Rejected ledger update for %s at %s: balance %d, change %d",
                    sku, warehouse.value, available, delta,
                )
                raise InsufficientStockError(sku, warehouse, available, -delta)

    def _make_log(
        self,
        sku: str,
        warehouse: WarehouseType,
        txn_type: TransactionType,
        quantity_change: int,
        reference_id: str,
        note: str,
        at: Optional[datetime],
        log_id: Optional[str] = None,
    ) -> InventoryLog:
        return InventoryLog(
            id=log_id or _new_log_id(),
            date=at or datetime.now(),
            sku=sku,
            warehouse=WarehouseType(warehouse),
            type=txn_type,
            quantity_change=quantity_change,
            reference_id=reference_id,
            note=note,
        )

    # ------------------------------------------------------------------
    # Operations
    # ------------------------------------------------------------------

    def transfer(
        self,
        sku: str,
        from_warehouse: WarehouseType,
        to_warehouse: WarehouseType,
        qty: int,
        reference_id: Optional[str] = None,
        note: str = "",
        at: Optional[datetime] = None,
    ) -> Tuple[InventoryLog, InventoryLog]:
        """
        Move stock between warehouses.

        Emits exactly two Transfer logs sharing reference_id: -qty at the
        source and +qty at the destination. The SKU total is unchanged.

        Returns:
            (outbound_half, inbound_half)

        Raises:
            ValueError: qty not a positive integer, or source == destination
            InsufficientStockError: negative balances disallowed and source short
        """
        _positive_qty(qty, "Transfer")
        from_warehouse = WarehouseType(from_warehouse)
        to_warehouse = WarehouseType(to_warehouse)
        if from_warehouse == to_warehouse:
            raise ValueError("Transfer source and destination must differ")

        reference_id = reference_id or f"TR-{uuid.uuid4().hex[:8].upper()}"
        at = at or datetime.now()
        base_id = _new_log_id()

        out_log = self._make_log(sku, from_warehouse, TransactionType.TRANSFER, -qty, reference_id, note, at, f"{base_id}-OUT")
        in_log = self._make_log(sku, to_warehouse, TransactionType.TRANSFER, qty, reference_id, note, at, f"{base_id}-IN")

        self.append_logs([out_log, in_log])
        logger.info("Transfer %s: %d x %s %s -> %s", reference_id, qty, sku, from_warehouse.value, to_warehouse.value)
        return out_log, in_log

    def record_inbound(
        self,
        sku: str,
        warehouse: WarehouseType,
        qty: int,
        reference_id: str = "",
        note: str = "",
        at: Optional[datetime] = None,
    ) -> InventoryLog:
        """Receive stock into a warehouse."""
        _positive_qty(qty, "Inbound")
        log = self._make_log(sku, warehouse, TransactionType.INBOUND, qty, reference_id, note, at)
        self.append_log(log)
        return log

    def record_outbound(
        self,
        sku: str,
        warehouse: WarehouseType,
        qty: int,
        reference_id: str = "",
        note: str = "",
        at: Optional[datetime] = None,
    ) -> InventoryLog:
        """Remove stock from a warehouse for a reason other than a sale."""
        _positive_qty(qty, "Outbound")
        log = self._make_log(sku, warehouse, TransactionType.OUTBOUND, -qty, reference_id, note, at)
        self.append_log(log)
        return log

    def record_adjustment(
        self,
        sku: str,
        warehouse: WarehouseType,
        delta: int,
        reference_id: str = "",
        note: str = "",
        at: Optional[datetime] = None,
    ) -> InventoryLog:
        """
        Manual stock correction (cycle count, damage, found stock).

        delta is signed and relative, not an absolute level.
        """
        if isinstance(delta, bool) or not isinstance(delta, int) or delta == 0:
            raise ValueError(f"Adjustment delta must be a non-zero integer, got {delta!r}")
        log = self._make_log(sku, warehouse, TransactionType.ADJUSTMENT, delta, reference_id, note, at)
        self.append_log(log)
        return log

    def fulfill_sale(
        self,
        sku: str,
        qty: int,
        reference_id: str = "",
        note: str = "",
        at: Optional[datetime] = None,
    ) -> InventoryLog:
        """
        Deduct a sale from the fulfillment warehouse.

        No sourcing policy: every sale ships from the configured
        fulfillment warehouse regardless of where stock sits.
        """
        _positive_qty(qty, "Sale")
        log = self._make_log(sku, self.fulfillment_warehouse, TransactionType.SALES, -qty, reference_id, note, at)
        self.append_log(log)
        return log

    def fulfill_order(
        self,
        lines: Mapping[str, int],
        reference_id: str,
        note: str = "",
        at: Optional[datetime] = None,
    ) -> List[InventoryLog]:
        """
        Fulfill a multi-line platform order: one Sales log per SKU line.

        Args:
            lines: {sku: qty}
            reference_id: Platform order id
        """
        at = at or datetime.now()
        logs = []
        for sku, qty in lines.items():
            _positive_qty(qty, f"Order line {sku}")
            logs.append(self._make_log(
                sku, self.fulfillment_warehouse, TransactionType.SALES, -qty, reference_id, note, at,
            ))
        self.append_logs(logs)
        logger.info("Order %s fulfilled from %s: %d line(s)", reference_id, self.fulfillment_warehouse.value, len(logs))
        return logs
