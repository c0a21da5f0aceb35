"""
Product catalog repository.

The whole catalog lives under one store key. Every read-modify-write goes
through `_lock`, so stock decrements are compare-and-decrement and never
drop below zero.
"""

import asyncio
import logging
import time
from typing import Optional

from ..core import store as _store
from ..core.store import ObjectStore, get_store
from ..models import Product

logger = logging.getLogger(__name__)


class ProductNotFoundError(LookupError):
    pass


DEFAULT_PRODUCTS: list[Product] = [
    Product(
        id="1",
        title="The Atlas",
        quote="Who is John Galt?",
        description=(
            "A stark, minimalist design featuring the question that stopped the world. "
            "High-contrast gold text on black."
        ),
        price=999,
        stock=50,
        image_url="https://picsum.photos/seed/atlas/400/500",
    ),
    Product(
        id="2",
        title="The Architect",
        quote="A building has integrity just like a man.",
        description="Inspired by Howard Roark. Geometric lines representing the Cortlandt Homes complex.",
        price=1299,
        stock=30,
        image_url="https://picsum.photos/seed/roark/400/500",
    ),
    Product(
        id="3",
        title="The Motor",
        quote=(
            "I swear by my life and my love of it that I will never live "
            "for the sake of another man."
        ),
        description="The ultimate oath of the objectivist. Industrial gear motif.",
        price=1499,
        stock=15,
        image_url="https://picsum.photos/seed/motor/400/500",
    ),
    Product(
        id="4",
        title="The Currency",
        quote="Money is the barometer of a society's virtue.",
        description="Features the sign of the dollar, the symbol of free trade and honest value.",
        price=1150,
        stock=100,
        image_url="https://picsum.photos/seed/money/400/500",
    ),
]


def new_product_id() -> str:
    return str(int(time.time() * 1000))


class CatalogRepository:
    def __init__(self, store: Optional[ObjectStore] = None):
        self._store = store
        self._lock = asyncio.Lock()

    @property
    def store(self) -> ObjectStore:
        return self._store or get_store()

    @property
    def key(self) -> str:
        return _store.store_key(_store.PRODUCTS)

    async def _load(self) -> list[Product]:
        raw = await self.store.get(self.key)
        return [Product.model_validate(p) for p in raw or []]

    async def _save(self, products: list[Product]) -> None:
        await self.store.set(self.key, [p.model_dump() for p in products])

    async def initialize_if_absent(self) -> bool:
        """Seed the default collection on first run. Returns True if it seeded."""
        async with self._lock:
            if await self.store.get(self.key) is not None:
                return False
            await self._save(DEFAULT_PRODUCTS)
            logger.info("Catalog seeded with %d default products", len(DEFAULT_PRODUCTS))
            return True

    async def list_products(self) -> list[Product]:
        return await self._load()

    async def get(self, product_id: str) -> Product:
        for product in await self._load():
            if product.id == product_id:
                return product
        raise ProductNotFoundError(product_id)

    async def put(self, product: Product) -> Product:
        """Insert or replace by id."""
        async with self._lock:
            products = await self._load()
            for i, existing in enumerate(products):
                if existing.id == product.id:
                    products[i] = product
                    break
            else:
                products.append(product)
            await self._save(products)
        logger.info("Saved product %s (%s)", product.id, product.title)
        return product

    async def set_stock(self, product_id: str, stock: int) -> Product:
        async with self._lock:
            products = await self._load()
            for i, existing in enumerate(products):
                if existing.id == product_id:
                    products[i] = existing.model_copy(update={"stock": max(0, stock)})
                    await self._save(products)
                    return products[i]
        raise ProductNotFoundError(product_id)

    async def decrement_stock(self, quantities: dict[str, int]) -> dict[str, int]:
        """
        Subtract quantities in one locked read-modify-write.
        Stock floors at zero; unknown product ids are skipped.
        Returns the units actually taken per product, for `restock`.
        """
        async with self._lock:
            products = await self._load()
            taken: dict[str, int] = {}
            for i, product in enumerate(products):
                qty = quantities.get(product.id)
                if not qty:
                    continue
                if qty > product.stock:
                    logger.warning(
                        "Stock for %s oversold: requested %d, had %d (clamped to 0)",
                        product.id, qty, product.stock,
                    )
                taken[product.id] = min(qty, product.stock)
                products[i] = product.model_copy(update={"stock": product.stock - taken[product.id]})
            await self._save(products)
        return taken

    async def restock(self, quantities: dict[str, int]) -> None:
        """Give back units taken by `decrement_stock`."""
        async with self._lock:
            products = await self._load()
            for i, product in enumerate(products):
                qty = quantities.get(product.id)
                if qty:
                    products[i] = product.model_copy(update={"stock": product.stock + qty})
            await self._save(products)
        logger.info("Restocked %s", quantities)


_catalog: Optional[CatalogRepository] = None


def get_catalog() -> CatalogRepository:
    global _catalog
    if _catalog is None:
        _catalog = CatalogRepository()
    return _catalog


def reset_catalog() -> None:
    global _catalog
    _catalog = None
