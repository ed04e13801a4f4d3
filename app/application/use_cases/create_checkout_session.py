from __future__ import annotations

import logging

from app.application.dto.checkout import (
    CheckoutDebugReport,
    CheckoutSessionParams,
    CreateCheckoutInput,
)
from app.application.ports.checkout_provider_port import CheckoutProviderPort
from app.domain.entities.checkout import CheckoutRequest, CheckoutResult, CorrelationMetadata
from app.domain.exceptions import ClientInputError, ConfigurationError, ProviderError
from app.domain.services.checkout_validation import (
    DEBUG_PLAN,
    is_absolute_url,
    normalize_plan,
    require_absolute_url,
    validate_subject_id,
    with_client_reference_id,
    with_session_id_placeholder,
)
from app.shared.config import Settings


logger = logging.getLogger(__name__)


class CreateCheckoutSessionUseCase:
    def __init__(
        self,
        *,
        settings: Settings,
        provider: CheckoutProviderPort | None,
    ):
        self._settings = settings
        self._provider = provider

    def ensure_configured(self) -> None:
        missing = self._settings.missing_keys()
        if missing:
            logger.error("create_checkout_session: missing_config key=%s", missing[0])
            raise ConfigurationError(f"Missing env: {missing[0]}", key=missing[0])

    def execute(self, command: CreateCheckoutInput) -> CheckoutResult | CheckoutDebugReport:
        self.ensure_configured()
        request = CheckoutRequest(
            subject_id=validate_subject_id(
                command.subject_id,
                prefix=self._settings.subject_id_prefix,
                min_length=self._settings.subject_id_min_length,
            ),
            plan=normalize_plan(command.plan),
        )

        if request.plan == DEBUG_PLAN:
            logger.info("create_checkout_session: debug subject_id=%s", request.subject_id)
            return CheckoutDebugReport(
                env=self._settings.presence(),
                success_url=self._settings.success_url,
                cancel_url=self._settings.cancel_url,
                origin=command.origin,
            )

        if self._settings.uses_payment_links:
            return self._payment_link_result(request)
        return self._create_session(request)

    def _payment_link_result(self, request: CheckoutRequest) -> CheckoutResult:
        catalog = self._settings.payment_link_catalog
        if not catalog:
            raise ConfigurationError("Missing env: PAYMENT_LINK_*", key="PAYMENT_LINK_*")
        link_url = catalog.resolve(request.plan)
        if link_url is None:
            raise ClientInputError("plan is invalid", plan=request.plan)
        if not is_absolute_url(link_url):
            key = f"PAYMENT_LINK_{request.plan.upper()}"
            raise ConfigurationError(f"Invalid env: {key} must be an absolute URL", key=key)

        logger.info(
            "create_checkout_session: payment_link subject_id=%s plan=%s",
            request.subject_id,
            request.plan,
        )
        return CheckoutResult(url=with_client_reference_id(link_url, request.subject_id))

    def _create_session(self, request: CheckoutRequest) -> CheckoutResult:
        price_id = self._settings.plan_catalog.resolve(request.plan)
        if price_id is None:
            raise ClientInputError("plan is invalid", plan=request.plan)

        success_url = require_absolute_url(self._settings.success_url, key="SUCCESS_URL")
        cancel_url = require_absolute_url(self._settings.cancel_url, key="CANCEL_URL")
        if self._provider is None:
            raise ConfigurationError("Missing env: STRIPE_SECRET_KEY", key="STRIPE_SECRET_KEY")

        correlation = CorrelationMetadata(
            subject_id=request.subject_id,
            plan=request.plan,
            subject_key=self._settings.correlation_metadata_key,
        )
        params = CheckoutSessionParams(
            mode=self._settings.checkout_mode,
            price_id=price_id,
            success_url=with_session_id_placeholder(success_url),
            cancel_url=cancel_url,
            metadata=correlation.as_metadata(),
            client_reference_id=request.subject_id,
        )

        session = self._provider.create_checkout_session(params)
        if not is_absolute_url(session.url):
            raise ProviderError(
                "Stripe API error",
                detail={"message": "checkout session response has no url"},
            )

        logger.info(
            "create_checkout_session: created session_id=%s subject_id=%s plan=%s mode=%s",
            session.id,
            request.subject_id,
            request.plan,
            params.mode,
        )
        return CheckoutResult(url=session.url, session_id=session.id)
