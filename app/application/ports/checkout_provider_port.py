from __future__ import annotations

from typing import Protocol

from app.application.dto.checkout import CheckoutSessionParams, ProviderSessionResult


class CheckoutProviderPort(Protocol):
    def create_checkout_session(self, params: CheckoutSessionParams) -> ProviderSessionResult:
        ...
