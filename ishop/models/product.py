"""
Catalog models.
"""

from typing import Optional

from pydantic import BaseModel, Field


class Product(BaseModel):
    id: str
    title: str
    quote: str = ""
    description: str = ""
    price: int = Field(ge=0)          # INR, whole rupees
    stock: int = Field(default=0, ge=0)
    image_url: str = ""

    @property
    def is_sold_out(self) -> bool:
        return self.stock <= 0


class ProductConcept(BaseModel):
    """Structured output schema for the AI product concept call."""

    title: str
    quote: str
    description: str
    price: int


class ProductDraft(BaseModel):
    """An AI-assembled product, not yet saved to the catalog."""

    title: str
    quote: str
    description: str
    price: int
    stock: int
    image_url: str
    image_is_fallback: bool = False
    fallback_reason: Optional[str] = None
