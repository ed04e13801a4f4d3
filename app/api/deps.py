from __future__ import annotations

from functools import lru_cache

from app.application.ports.checkout_provider_port import CheckoutProviderPort
from app.application.use_cases.create_checkout_session import CreateCheckoutSessionUseCase
from app.shared.config import Settings, get_settings


def get_app_settings() -> Settings:
    return get_settings()


@lru_cache(maxsize=1)
def _get_checkout_provider() -> CheckoutProviderPort | None:
    settings = get_settings()
    if not settings.stripe_secret_key:
        return None
    if settings.stripe_transport == "http":
        from app.infrastructure.clients.stripe_http_client import StripeHttpClient

        return StripeHttpClient(
            secret_key=settings.stripe_secret_key,
            api_base=settings.stripe_api_base,
            timeout_seconds=settings.stripe_timeout_seconds,
        )

    from app.infrastructure.clients.stripe_client import StripeClient

    return StripeClient(
        secret_key=settings.stripe_secret_key,
        timeout_seconds=settings.stripe_timeout_seconds,
    )


def get_create_checkout_session_use_case() -> CreateCheckoutSessionUseCase:
    return CreateCheckoutSessionUseCase(
        settings=get_settings(),
        provider=_get_checkout_provider(),
    )
