"""
Design commission models.
"""

from typing import Optional

from pydantic import BaseModel


class DesignRequest(BaseModel):
    id: str
    customer_name: str
    quote: str
    style_preference: str = ""
    shirt_color: Optional[str] = None
    font_style: Optional[str] = None
    date: str
    generated_image_url: Optional[str] = None
