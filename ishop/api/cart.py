"""
Cart API (per shopper, X-Shopper-Id).

GET    /v1/cart
POST   /v1/cart/items               — Add one unit of a product
PATCH  /v1/cart/items/{product_id}  — Set quantity
DELETE /v1/cart/items/{product_id}  — Remove line
DELETE /v1/cart                     — Empty the cart

Changes are refused (409) while the shopper's checkout is PROCESSING.
"""

from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel

from ..core.auth import Shopper
from ..core.dependencies import get_shopper
from ..models import CartLine
from ..services import sessions
from ..services.cart import Cart, CartError
from ..services.catalog import ProductNotFoundError, get_catalog
from ..services.checkout import CheckoutStateError

cart_router = APIRouter(prefix="/cart", tags=["cart"])


class CartOut(BaseModel):
    items: list[CartLine] = []
    total: int = 0
    count: int = 0


class AddItem(BaseModel):
    product_id: str


class QuantityUpdate(BaseModel):
    quantity: int


def _out(cart: Cart) -> CartOut:
    return CartOut(items=cart.lines, total=cart.total, count=cart.count)


def _editable(shopper: Shopper) -> Cart:
    try:
        return sessions.editable_cart(shopper.shopper_id)
    except CheckoutStateError as e:
        raise HTTPException(status_code=409, detail=str(e))


async def _product(product_id: str):
    try:
        return await get_catalog().get(product_id)
    except ProductNotFoundError:
        raise HTTPException(status_code=404, detail="Product not found")


@cart_router.get("", response_model=CartOut)
async def get_cart(shopper: Shopper = Depends(get_shopper)):
    return _out(sessions.get_cart(shopper.shopper_id))


@cart_router.post("/items", response_model=CartOut)
async def add_item(body: AddItem, shopper: Shopper = Depends(get_shopper)):
    cart = _editable(shopper)
    product = await _product(body.product_id)
    try:
        cart.add(product)
    except CartError as e:
        raise HTTPException(status_code=400, detail=str(e))
    return _out(cart)


@cart_router.patch("/items/{product_id}", response_model=CartOut)
async def update_item(product_id: str, body: QuantityUpdate, shopper: Shopper = Depends(get_shopper)):
    cart = _editable(shopper)
    product = await _product(product_id)
    try:
        cart.update_quantity(product, body.quantity)
    except CartError as e:
        raise HTTPException(status_code=400, detail=str(e))
    return _out(cart)


@cart_router.delete("/items/{product_id}", response_model=CartOut)
async def remove_item(product_id: str, shopper: Shopper = Depends(get_shopper)):
    cart = _editable(shopper)
    cart.remove(product_id)
    return _out(cart)


@cart_router.delete("", response_model=CartOut)
async def clear_cart(shopper: Shopper = Depends(get_shopper)):
    cart = _editable(shopper)
    cart.clear()
    return _out(cart)
