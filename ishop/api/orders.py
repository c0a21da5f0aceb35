"""
Orders API (admin).

GET  /v1/orders                      — Order history
POST /v1/orders/{order_id}/complete  — PENDING → COMPLETED
"""

from fastapi import APIRouter, HTTPException

from ..models import Order
from ..services.orders import OrderNotFoundError, get_ledger

orders_router = APIRouter(prefix="/orders", tags=["orders"])


@orders_router.get("", response_model=list[Order])
async def list_orders():
    return await get_ledger().list_orders()


@orders_router.post("/{order_id}/complete", response_model=Order)
async def complete_order(order_id: str):
    try:
        return await get_ledger().complete(order_id)
    except OrderNotFoundError:
        raise HTTPException(status_code=404, detail="Order not found")
