from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field


class CheckoutResponse(BaseModel):
    ok: bool = True
    url: str
    id: str | None = None


class CheckoutDebugResponse(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    ok: bool = True
    debug: bool = True
    env: dict[str, bool]
    success_url: str = Field(..., alias="successUrl")
    cancel_url: str = Field(..., alias="cancelUrl")
    origin: str | None = None
