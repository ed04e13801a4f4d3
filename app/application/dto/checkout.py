from __future__ import annotations

from dataclasses import dataclass, field


@dataclass(frozen=True)
class CreateCheckoutInput:
    subject_id: str
    plan: str
    origin: str | None = None


@dataclass(frozen=True)
class CheckoutDebugReport:
    env: dict[str, bool]
    success_url: str
    cancel_url: str
    origin: str | None


@dataclass(frozen=True)
class CheckoutSessionParams:
    mode: str
    price_id: str
    success_url: str
    cancel_url: str
    metadata: dict[str, str] = field(default_factory=dict)
    client_reference_id: str | None = None

    def to_stripe_payload(self) -> dict:
        payload: dict = {
            "mode": self.mode,
            "line_items": [{"price": self.price_id, "quantity": 1}],
            "success_url": self.success_url,
            "cancel_url": self.cancel_url,
            "metadata": dict(self.metadata),
        }
        # checkout.session.* events expose the session metadata, invoice.* and
        # payment_intent.* events only the recurring/intent metadata.
        if self.mode == "subscription":
            payload["subscription_data"] = {"metadata": dict(self.metadata)}
        else:
            payload["payment_intent_data"] = {"metadata": dict(self.metadata)}
        if self.client_reference_id:
            payload["client_reference_id"] = self.client_reference_id
        return payload


@dataclass(frozen=True)
class ProviderSessionResult:
    id: str | None
    url: str
