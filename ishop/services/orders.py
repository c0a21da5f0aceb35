"""
Order ledger — persists finalized orders and takes their stock out of the catalog.
"""

import asyncio
import logging
from typing import Optional

from ..core import store as _store
from ..core.store import ObjectStore, get_store
from ..models import Order, OrderStatus
from .catalog import CatalogRepository, get_catalog

logger = logging.getLogger(__name__)


class OrderNotFoundError(LookupError):
    pass


class OrderLedger:
    def __init__(
        self,
        store: Optional[ObjectStore] = None,
        catalog: Optional[CatalogRepository] = None,
    ):
        self._store = store
        self._catalog = catalog
        self._lock = asyncio.Lock()

    @property
    def store(self) -> ObjectStore:
        return self._store or get_store()

    @property
    def catalog(self) -> CatalogRepository:
        return self._catalog or get_catalog()

    @property
    def key(self) -> str:
        return _store.store_key(_store.ORDERS)

    async def _load(self) -> list[Order]:
        raw = await self.store.get(self.key)
        return [Order.model_validate(o) for o in raw or []]

    async def _save(self, orders: list[Order]) -> None:
        await self.store.set(self.key, [o.model_dump(mode="json") for o in orders])

    async def record(self, order: Order) -> Order:
        """
        Take the stock, then append the order. Either both happen or neither:
        if the append fails the stock is given back.

        Recording an order id that is already in the ledger is a no-op, so a
        finalize can be retried with the same order.
        """
        async with self._lock:
            orders = await self._load()
            for existing in orders:
                if existing.id == order.id:
                    logger.info("Order %s already recorded", order.id)
                    return existing

            quantities: dict[str, int] = {}
            for line in order.items:
                quantities[line.product.id] = quantities.get(line.product.id, 0) + line.quantity
            taken = await self.catalog.decrement_stock(quantities)

            try:
                orders.append(order)
                await self._save(orders)
            except Exception:
                logger.exception("Order %s could not be saved, restoring stock", order.id)
                await self.catalog.restock(taken)
                raise

        logger.info(
            "Order %s recorded: %d line(s), total=%d, mode=%s",
            order.id, len(order.items), order.total_amount, order.payment_mode.value,
        )
        return order

    async def list_orders(self) -> list[Order]:
        return await self._load()

    async def complete(self, order_id: str) -> Order:
        """PENDING → COMPLETED. Completing an already completed order is a no-op."""
        async with self._lock:
            orders = await self._load()
            for i, order in enumerate(orders):
                if order.id != order_id:
                    continue
                if order.status is OrderStatus.PENDING:
                    orders[i] = order.model_copy(update={"status": OrderStatus.COMPLETED})
                    await self._save(orders)
                    logger.info("Order %s completed", order_id)
                return orders[i]
        raise OrderNotFoundError(order_id)


_ledger: Optional[OrderLedger] = None


def get_ledger() -> OrderLedger:
    global _ledger
    if _ledger is None:
        _ledger = OrderLedger()
    return _ledger


def reset_ledger() -> None:
    global _ledger
    _ledger = None
