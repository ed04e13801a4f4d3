from __future__ import annotations

import pytest

from app.application.dto.checkout import CheckoutDebugReport, CreateCheckoutInput
from app.application.use_cases.create_checkout_session import CreateCheckoutSessionUseCase
from app.domain.entities.plan import PlanCatalog
from app.domain.exceptions import ClientInputError, ConfigurationError, ProviderError
from checkout_fixtures import SECRET_KEY, SUBJECT_ID, FakeCheckoutProvider, make_settings


def _use_case(provider: FakeCheckoutProvider | None = None, **overrides) -> CreateCheckoutSessionUseCase:
    return CreateCheckoutSessionUseCase(
        settings=make_settings(**overrides),
        provider=provider if provider is not None else FakeCheckoutProvider(),
    )


def test_execute_returns_checkout_url_and_session_id():
    provider = FakeCheckoutProvider()
    use_case = _use_case(provider)

    result = use_case.execute(CreateCheckoutInput(subject_id=SUBJECT_ID, plan="bronze"))

    assert result.url == "https://checkout.stripe.com/pay/cs_test_abc"
    assert result.session_id == "cs_test_abc"
    assert len(provider.calls) == 1
    params = provider.calls[0]
    assert params.mode == "subscription"
    assert params.price_id == "price_bronze"
    assert params.cancel_url == "https://line-pay.example.com/cancel.html"
    assert params.client_reference_id == SUBJECT_ID


def test_execute_writes_correlation_metadata_into_every_container():
    provider = FakeCheckoutProvider()
    use_case = _use_case(provider)

    use_case.execute(CreateCheckoutInput(subject_id=f"  {SUBJECT_ID} ", plan=" Gold "))

    payload = provider.calls[0].to_stripe_payload()
    expected = {"userId": SUBJECT_ID, "plan": "gold"}
    assert payload["metadata"] == expected
    assert payload["subscription_data"]["metadata"] == expected
    assert payload["line_items"] == [{"price": "price_gold", "quantity": 1}]
    assert "payment_intent_data" not in payload


def test_execute_payment_mode_uses_payment_intent_metadata():
    provider = FakeCheckoutProvider()
    use_case = _use_case(provider, checkout_mode="payment", correlation_metadata_key="line_user_id")

    use_case.execute(CreateCheckoutInput(subject_id=SUBJECT_ID, plan="silver"))

    payload = provider.calls[0].to_stripe_payload()
    assert payload["mode"] == "payment"
    assert payload["metadata"] == {"line_user_id": SUBJECT_ID, "plan": "silver"}
    assert payload["payment_intent_data"]["metadata"] == payload["metadata"]
    assert "subscription_data" not in payload


def test_execute_appends_session_id_placeholder_to_success_url():
    provider = FakeCheckoutProvider()
    use_case = _use_case(provider, success_url="https://example.com/done?lang=ja")

    use_case.execute(CreateCheckoutInput(subject_id=SUBJECT_ID, plan="bronze"))

    assert provider.calls[0].success_url == "https://example.com/done?lang=ja&session_id={CHECKOUT_SESSION_ID}"


def test_execute_rejects_unknown_plan_without_calling_provider():
    provider = FakeCheckoutProvider()
    use_case = _use_case(provider)

    with pytest.raises(ClientInputError) as exc_info:
        use_case.execute(CreateCheckoutInput(subject_id=SUBJECT_ID, plan="platinum"))

    assert exc_info.value.status_code == 400
    assert exc_info.value.message == "plan is invalid"
    assert exc_info.value.context == {"plan": "platinum"}
    assert provider.calls == []


def test_execute_treats_missing_price_as_invalid_plan():
    provider = FakeCheckoutProvider()
    use_case = _use_case(provider, plan_catalog=PlanCatalog({"bronze": "", "silver": "price_silver"}))

    with pytest.raises(ClientInputError) as exc_info:
        use_case.execute(CreateCheckoutInput(subject_id=SUBJECT_ID, plan="bronze"))

    assert exc_info.value.status_code == 400
    assert exc_info.value.message == "plan is invalid"
    assert provider.calls == []


@pytest.mark.parametrize("subject_id", ["", "   ", "1234567890", "u123456"])
def test_execute_rejects_invalid_subject_before_calling_provider(subject_id: str):
    provider = FakeCheckoutProvider()
    use_case = _use_case(provider)

    with pytest.raises(ClientInputError) as exc_info:
        use_case.execute(CreateCheckoutInput(subject_id=subject_id, plan="bronze"))

    assert exc_info.value.message.startswith("subjectId is required")
    assert exc_info.value.context["subjectId"] == subject_id.strip()
    assert provider.calls == []


def test_execute_enforces_subject_min_length():
    use_case = _use_case(subject_id_min_length=33)

    with pytest.raises(ClientInputError) as exc_info:
        use_case.execute(CreateCheckoutInput(subject_id="U123", plan="bronze"))

    assert exc_info.value.message == "subjectId is too short"


def test_execute_rejects_empty_plan():
    with pytest.raises(ClientInputError) as exc_info:
        _use_case().execute(CreateCheckoutInput(subject_id=SUBJECT_ID, plan=""))

    assert exc_info.value.message == "plan is required"


def test_execute_debug_reports_presence_only():
    provider = FakeCheckoutProvider()
    use_case = _use_case(provider, plan_catalog=PlanCatalog({"bronze": "price_bronze"}))

    report = use_case.execute(
        CreateCheckoutInput(subject_id=SUBJECT_ID, plan="debug", origin="https://liff.example.com")
    )

    assert isinstance(report, CheckoutDebugReport)
    assert report.env == {
        "STRIPE_SECRET_KEY": True,
        "PRICE_BRONZE": True,
        "PRICE_SILVER": False,
        "PRICE_GOLD": False,
        "SUCCESS_URL": True,
        "CANCEL_URL": True,
    }
    assert report.origin == "https://liff.example.com"
    assert SECRET_KEY not in repr(report)
    assert provider.calls == []


def test_execute_fails_with_configuration_error_naming_missing_key():
    provider = FakeCheckoutProvider()
    use_case = _use_case(provider, cancel_url="")

    with pytest.raises(ConfigurationError) as exc_info:
        use_case.execute(CreateCheckoutInput(subject_id=SUBJECT_ID, plan="bronze"))

    assert exc_info.value.status_code == 500
    assert exc_info.value.message == "Missing env: CANCEL_URL"
    assert provider.calls == []


def test_execute_rejects_relative_success_url_as_configuration_error():
    provider = FakeCheckoutProvider()
    use_case = _use_case(provider, success_url="/success.html")

    with pytest.raises(ConfigurationError) as exc_info:
        use_case.execute(CreateCheckoutInput(subject_id=SUBJECT_ID, plan="bronze"))

    assert exc_info.value.status_code == 500
    assert exc_info.value.context == {"key": "SUCCESS_URL"}
    assert provider.calls == []


def test_execute_propagates_provider_error():
    provider = FakeCheckoutProvider(
        error=ProviderError("Stripe API error", status_code=402, detail={"error": {"code": "card_declined"}})
    )
    use_case = _use_case(provider)

    with pytest.raises(ProviderError) as exc_info:
        use_case.execute(CreateCheckoutInput(subject_id=SUBJECT_ID, plan="bronze"))

    assert exc_info.value.status_code == 402
    assert len(provider.calls) == 1


def test_execute_payment_link_appends_client_reference_id():
    provider = FakeCheckoutProvider()
    use_case = _use_case(
        provider,
        stripe_secret_key="",
        correlation_strategy="payment_link",
        payment_link_catalog=PlanCatalog({"bronze": "https://buy.stripe.com/test_bronze?locale=ja"}),
    )

    result = use_case.execute(CreateCheckoutInput(subject_id=SUBJECT_ID, plan="bronze"))

    assert result.url == f"https://buy.stripe.com/test_bronze?locale=ja&client_reference_id={SUBJECT_ID}"
    assert result.session_id is None
    assert provider.calls == []


def test_execute_payment_link_unknown_plan_is_client_error():
    use_case = _use_case(
        correlation_strategy="payment_link",
        payment_link_catalog=PlanCatalog({"bronze": "https://buy.stripe.com/test_bronze"}),
    )

    with pytest.raises(ClientInputError):
        use_case.execute(CreateCheckoutInput(subject_id=SUBJECT_ID, plan="gold"))
