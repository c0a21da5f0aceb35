"""
Shopper profile (session identity).
"""

from pydantic import BaseModel


class ShopperProfile(BaseModel):
    name: str
    email: str = ""
    avatar: str = ""
