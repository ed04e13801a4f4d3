from __future__ import annotations

import logging
from urllib.parse import urlencode

import httpx

from app.application.dto.checkout import CheckoutSessionParams, ProviderSessionResult
from app.application.ports.checkout_provider_port import CheckoutProviderPort
from app.domain.exceptions import ProviderError, ProviderTimeoutError
from app.domain.services.form_encoding import flatten_form_pairs


logger = logging.getLogger(__name__)


class StripeHttpClient(CheckoutProviderPort):
    """Creates checkout sessions with a single form-encoded POST, no SDK."""

    def __init__(
        self,
        *,
        secret_key: str,
        api_base: str = "https://api.stripe.com",
        timeout_seconds: float = 10,
        transport: httpx.BaseTransport | None = None,
    ):
        self._secret_key = secret_key
        self._api_base = api_base.rstrip("/")
        self._timeout = timeout_seconds
        self._transport = transport

    def create_checkout_session(self, params: CheckoutSessionParams) -> ProviderSessionResult:
        url = f"{self._api_base}/v1/checkout/sessions"
        body = urlencode(flatten_form_pairs(params.to_stripe_payload()))
        headers = {
            "Authorization": f"Bearer {self._secret_key}",
            "Content-Type": "application/x-www-form-urlencoded",
        }
        try:
            with httpx.Client(timeout=self._timeout, transport=self._transport) as client:
                response = client.post(url, content=body, headers=headers)
        except httpx.TimeoutException as exc:
            logger.warning("stripe_http_client: timeout timeout_seconds=%s", self._timeout)
            raise ProviderTimeoutError("Stripe API timeout") from exc
        except httpx.HTTPError as exc:
            logger.warning("stripe_http_client: transport_error error=%s", type(exc).__name__)
            raise ProviderError("Stripe API unreachable", status_code=502) from exc

        try:
            payload = response.json()
        except ValueError:
            payload = {"raw": response.text}

        if not response.is_success:
            logger.warning("stripe_http_client: api_error status=%s", response.status_code)
            raise ProviderError(
                "Stripe API error",
                status_code=response.status_code,
                detail=payload,
            )

        session_url = payload.get("url") if isinstance(payload, dict) else None
        if not session_url:
            raise ProviderError("Stripe API error", detail=payload)
        session_id = payload.get("id")
        return ProviderSessionResult(
            id=str(session_id) if session_id else None,
            url=str(session_url),
        )
