"""Response envelopes shared across routers."""

from __future__ import annotations

from services.feed.schemas import CamelModel


class SuccessResponse(CamelModel):
    success: bool = True
