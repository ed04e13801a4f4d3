from __future__ import annotations

import logging

import stripe

from app.application.dto.checkout import CheckoutSessionParams, ProviderSessionResult
from app.application.ports.checkout_provider_port import CheckoutProviderPort
from app.domain.exceptions import ProviderError, ProviderTimeoutError


logger = logging.getLogger(__name__)


class StripeClient(CheckoutProviderPort):
    def __init__(self, *, secret_key: str, timeout_seconds: float):
        self._secret_key = secret_key
        stripe.max_network_retries = 0
        stripe.default_http_client = stripe.RequestsClient(timeout=timeout_seconds)

    def create_checkout_session(self, params: CheckoutSessionParams) -> ProviderSessionResult:
        try:
            session = stripe.checkout.Session.create(
                api_key=self._secret_key,
                **params.to_stripe_payload(),
            )
        except stripe.APIConnectionError as exc:
            logger.warning("stripe_client: connection_error error=%s", exc.user_message or exc)
            raise ProviderTimeoutError("Stripe API timeout") from exc
        except stripe.StripeError as exc:
            detail = exc.json_body or {"raw": exc.http_body or str(exc)}
            logger.warning(
                "stripe_client: api_error status=%s code=%s",
                exc.http_status,
                exc.code,
            )
            raise ProviderError(
                "Stripe API error",
                status_code=exc.http_status or 500,
                detail=detail,
            ) from exc

        session_id = getattr(session, "id", None)
        session_url = getattr(session, "url", None)
        if not session_url:
            raise ProviderError(
                "Stripe API error",
                detail={"message": "checkout session response is incomplete"},
            )
        return ProviderSessionResult(
            id=str(session_id) if session_id else None,
            url=str(session_url),
        )
