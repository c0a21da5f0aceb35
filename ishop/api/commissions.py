"""
Design commission API.

GET    /v1/commissions/options     — Shirt colours and font styles
POST   /v1/commissions/refine      — Rewrite a concept into a visual prompt
POST   /v1/commissions/visualize   — Refine + render a preview
DELETE /v1/commissions/visualize   — Form closed: drop in-flight/last preview
GET    /v1/commissions/preview     — Last applied preview
POST   /v1/commissions             — Submit the request to the designers
GET    /v1/commissions             — All requests (admin)
"""

import logging
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel, Field

from ..core.auth import Shopper
from ..core.dependencies import get_shopper, require_admin
from ..models import DesignRequest
from ..services import commissions, concept_pipeline
from ..services.gemini import GeminiCallError
from ..services.image_generator import FALLBACK_NOTICE

logger = logging.getLogger(__name__)

commissions_router = APIRouter(prefix="/commissions", tags=["commissions"])


class ConceptIn(BaseModel):
    quote: str = Field(min_length=1)
    style_preference: str = ""
    font_style: Optional[str] = None
    shirt_color: Optional[str] = None


class RefineOut(BaseModel):
    refined_prompt: str


class VisualizeOut(BaseModel):
    request_id: str
    refined_prompt: str
    image_url: str
    tier: Optional[str] = None
    is_fallback: bool = False
    reason: Optional[str] = None
    notice: Optional[str] = None
    applied: bool = True


class RequestIn(BaseModel):
    customer_name: str = ""
    quote: str = Field(min_length=1)
    style_preference: str = ""
    shirt_color: Optional[str] = None
    font_style: Optional[str] = None
    generated_image_url: Optional[str] = None


@commissions_router.get("/options")
async def options():
    return {
        "shirt_colors": concept_pipeline.SHIRT_COLORS,
        "font_styles": concept_pipeline.FONT_STYLES,
        "default_shirt_color": concept_pipeline.DEFAULT_SHIRT_COLOR,
        "default_font_style": concept_pipeline.DEFAULT_FONT,
    }


@commissions_router.post("/refine", response_model=RefineOut)
async def refine(body: ConceptIn):
    refined = await concept_pipeline.refine_commission(
        body.quote, body.style_preference, body.font_style, body.shirt_color
    )
    return RefineOut(refined_prompt=refined)


@commissions_router.post("/visualize", response_model=VisualizeOut)
async def visualize(body: ConceptIn, shopper: Shopper = Depends(get_shopper)):
    active = commissions.get_active_requests()
    request_id = active.begin(shopper.shopper_id)
    try:
        preview = await concept_pipeline.visualize_commission(
            body.quote, body.style_preference, body.font_style, body.shirt_color
        )
    except ValueError as e:
        active.finish(shopper.shopper_id, request_id)
        raise HTTPException(status_code=400, detail=str(e))
    except GeminiCallError as e:
        active.finish(shopper.shopper_id, request_id)
        logger.error("Visualization failed: %s", e)
        raise HTTPException(
            status_code=502,
            detail="Visualization failed completely. Please try again later.",
        )

    result = preview.result
    out = VisualizeOut(
        request_id=request_id,
        refined_prompt=preview.refined_prompt,
        image_url=result.image,
        tier=getattr(result, "tier", None),
        is_fallback=result.is_fallback,
        reason=getattr(result, "reason", None),
        notice=FALLBACK_NOTICE if result.is_fallback else None,
    )
    out.applied = await commissions.apply_preview(
        shopper.shopper_id, request_id, out.model_dump(exclude={"applied"})
    )
    return out


@commissions_router.delete("/visualize")
async def cancel_visualize(shopper: Shopper = Depends(get_shopper)):
    await commissions.clear_preview(shopper.shopper_id)
    return {"cancelled": True}


@commissions_router.get("/preview")
async def get_preview(shopper: Shopper = Depends(get_shopper)):
    preview = await commissions.get_preview(shopper.shopper_id)
    if preview is None:
        raise HTTPException(status_code=404, detail="No preview")
    return preview


@commissions_router.post("", response_model=DesignRequest)
async def submit_request(body: RequestIn, shopper: Shopper = Depends(get_shopper)):
    name = body.customer_name.strip() or shopper.name
    if not name:
        raise HTTPException(status_code=400, detail="Your name is required.")

    image_url = body.generated_image_url
    if image_url is None:
        preview = await commissions.get_preview(shopper.shopper_id)
        image_url = preview["image_url"] if preview else None

    request = await commissions.save_request(
        customer_name=name,
        quote=body.quote,
        style_preference=body.style_preference,
        shirt_color=body.shirt_color,
        font_style=body.font_style,
        generated_image_url=image_url,
    )
    await commissions.clear_preview(shopper.shopper_id)
    return request


@commissions_router.get(
    "", response_model=list[DesignRequest], dependencies=[Depends(require_admin)]
)
async def list_requests():
    return await commissions.list_requests()
