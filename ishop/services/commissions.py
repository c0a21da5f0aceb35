"""
Design commission requests and the per-shopper visualization guard.

A visualization can take a while. If the shopper closes the form or starts
another one meanwhile, the late result must not overwrite anything: each run
gets a request id, and its preview is stored only if that id is still the
active one.
"""

import logging
import time
import uuid
from datetime import datetime, timezone
from typing import Optional

from ..core import store as _store
from ..core.store import get_store
from ..models import DesignRequest

logger = logging.getLogger(__name__)


class ActiveRequests:
    def __init__(self):
        self._active: dict[str, str] = {}

    def begin(self, owner: str) -> str:
        request_id = uuid.uuid4().hex[:12]
        self._active[owner] = request_id
        return request_id

    def is_current(self, owner: str, request_id: str) -> bool:
        return self._active.get(owner) == request_id

    def cancel(self, owner: str) -> None:
        self._active.pop(owner, None)

    def finish(self, owner: str, request_id: str) -> None:
        if self.is_current(owner, request_id):
            del self._active[owner]


_active_requests = ActiveRequests()


def get_active_requests() -> ActiveRequests:
    return _active_requests


# ── Preview (last applied visualization per shopper) ─────────────────


async def apply_preview(shopper_id: str, request_id: str, preview: dict) -> bool:
    """Store `preview` unless the request was cancelled or superseded."""
    active = get_active_requests()
    if not active.is_current(shopper_id, request_id):
        logger.info("Discarding late visualization %s for %s", request_id, shopper_id)
        return False
    await get_store().set(_store.store_key(_store.COMMISSION_PREVIEW, shopper_id), preview)
    active.finish(shopper_id, request_id)
    return True


async def get_preview(shopper_id: str) -> Optional[dict]:
    return await get_store().get(_store.store_key(_store.COMMISSION_PREVIEW, shopper_id))


async def clear_preview(shopper_id: str) -> None:
    get_active_requests().cancel(shopper_id)
    await get_store().delete(_store.store_key(_store.COMMISSION_PREVIEW, shopper_id))


# ── Request log ──────────────────────────────────────────────────────


async def save_request(
    customer_name: str,
    quote: str,
    style_preference: str = "",
    shirt_color: Optional[str] = None,
    font_style: Optional[str] = None,
    generated_image_url: Optional[str] = None,
) -> DesignRequest:
    request = DesignRequest(
        id=str(int(time.time() * 1000)),
        customer_name=customer_name,
        quote=quote,
        style_preference=style_preference,
        shirt_color=shirt_color,
        font_style=font_style,
        date=datetime.now(timezone.utc).isoformat(),
        generated_image_url=generated_image_url,
    )
    key = _store.store_key(_store.REQUESTS)
    store = get_store()
    requests = await store.get(key) or []
    requests.append(request.model_dump())
    await store.set(key, requests)
    logger.info("Design request %s saved for %s", request.id, customer_name)
    return request


async def list_requests() -> list[DesignRequest]:
    raw = await get_store().get(_store.store_key(_store.REQUESTS))
    return [DesignRequest.model_validate(r) for r in raw or []]
