"""
Catalog API.

GET   /v1/products                — The collection
POST  /v1/products                — Add / replace a product (admin)
PATCH /v1/products/{id}/stock     — Set stock (admin)
POST  /v1/products/generate       — AI-drafted product (admin, not saved)
"""

import logging
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel, Field

from ..core.dependencies import require_admin
from ..core.flags import get_flags
from ..models import Product, ProductDraft
from ..services import concept_pipeline
from ..services.catalog import ProductNotFoundError, get_catalog, new_product_id
from ..services.gemini import GeminiCallError

logger = logging.getLogger(__name__)

products_router = APIRouter(prefix="/products", tags=["products"])


class ProductIn(BaseModel):
    id: Optional[str] = None
    title: str = Field(min_length=1)
    quote: str = ""
    description: str = ""
    price: int = Field(gt=0)
    stock: int = Field(default=50, ge=0)
    image_url: str = "https://picsum.photos/seed/new/400/500"


class StockUpdate(BaseModel):
    stock: int = Field(ge=0)


@products_router.get("", response_model=list[Product])
async def list_products():
    return await get_catalog().list_products()


@products_router.post("", response_model=Product, dependencies=[Depends(require_admin)])
async def save_product(body: ProductIn):
    product = Product(**body.model_dump(exclude={"id"}), id=body.id or new_product_id())
    return await get_catalog().put(product)


@products_router.patch(
    "/{product_id}/stock", response_model=Product, dependencies=[Depends(require_admin)]
)
async def update_stock(product_id: str, body: StockUpdate):
    try:
        return await get_catalog().set_stock(product_id, body.stock)
    except ProductNotFoundError:
        raise HTTPException(status_code=404, detail="Product not found")


@products_router.post(
    "/generate", response_model=ProductDraft, dependencies=[Depends(require_admin)]
)
async def generate_product():
    """Draft a product with the AI. The admin reviews it and saves it via POST /products."""
    if not get_flags().enable_ai_concepts:
        raise HTTPException(status_code=404, detail="AI concepts are disabled")
    try:
        return await concept_pipeline.auto_generate_product()
    except GeminiCallError as e:
        logger.error("AI product generation failed: %s", e)
        raise HTTPException(status_code=502, detail="AI Generation Failed. Please try again.")
