"""
Cart and order models.
"""

from enum import Enum
from typing import Optional

from pydantic import BaseModel, Field

from .product import Product


class PaymentMode(str, Enum):
    COD = "COD"    # Cash on delivery, no gateway involved
    UPI = "UPI"    # Electronic transfer through the payment gateway


class OrderStatus(str, Enum):
    PENDING = "PENDING"
    COMPLETED = "COMPLETED"


class CartLine(BaseModel):
    product: Product
    quantity: int = Field(ge=1)

    @property
    def subtotal(self) -> int:
        return self.product.price * self.quantity


class Order(BaseModel):
    id: str
    items: list[CartLine]
    total_amount: int
    payment_mode: PaymentMode
    date: str
    status: OrderStatus = OrderStatus.PENDING
    customer_name: str
    customer_address: str
    customer_email: str = ""
    payment_reference: Optional[str] = None
    payment_simulated: bool = False
