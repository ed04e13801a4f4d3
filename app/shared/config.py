from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from functools import lru_cache

from dotenv import load_dotenv

from app.domain.entities.plan import PlanCatalog


load_dotenv()

logger = logging.getLogger(__name__)


CHECKOUT_MODES = ("subscription", "payment")
RESPONSE_MODES = ("json", "redirect")
CORRELATION_STRATEGIES = ("session_metadata", "payment_link")
STRIPE_TRANSPORTS = ("sdk", "http")
CHECKOUT_METHODS = ("GET", "POST")


def _env(name: str, default: str = "") -> str:
    # Values pasted into hosting dashboards often carry stray whitespace/newlines.
    return (os.getenv(name) or default).strip()


def _csv(name: str, default: str) -> tuple[str, ...]:
    return tuple(item.strip() for item in _env(name, default).split(",") if item.strip())


def _choice(name: str, choices: tuple[str, ...], default: str) -> str:
    value = _env(name, default).lower()
    if value not in choices:
        logger.warning("config: invalid_choice key=%s value=%s fallback=%s", name, value, default)
        return default
    return value


@dataclass(frozen=True)
class Settings:
    stripe_secret_key: str
    stripe_transport: str
    stripe_api_base: str
    stripe_timeout_seconds: float
    plans: tuple[str, ...]
    plan_catalog: PlanCatalog
    payment_link_catalog: PlanCatalog
    success_url: str
    cancel_url: str
    checkout_mode: str
    checkout_methods: tuple[str, ...]
    response_mode: str
    correlation_strategy: str
    correlation_metadata_key: str
    subject_id_prefix: str
    subject_id_min_length: int
    cors_allow_origins: tuple[str, ...]
    log_level: str

    @property
    def uses_payment_links(self) -> bool:
        return self.correlation_strategy == "payment_link"

    def required_values(self) -> dict[str, str]:
        # Payment links carry their own redirect targets in the Stripe dashboard.
        if self.uses_payment_links:
            return {}
        return {
            "STRIPE_SECRET_KEY": self.stripe_secret_key,
            "SUCCESS_URL": self.success_url,
            "CANCEL_URL": self.cancel_url,
        }

    def missing_keys(self) -> list[str]:
        return [key for key, value in self.required_values().items() if not value]

    def presence(self) -> dict[str, bool]:
        flags = {"STRIPE_SECRET_KEY": bool(self.stripe_secret_key)}
        catalog_prefix = "PAYMENT_LINK" if self.uses_payment_links else "PRICE"
        catalog = self.payment_link_catalog if self.uses_payment_links else self.plan_catalog
        for plan in self.plans:
            flags[f"{catalog_prefix}_{plan.upper()}"] = plan in catalog
        flags["SUCCESS_URL"] = bool(self.success_url)
        flags["CANCEL_URL"] = bool(self.cancel_url)
        return flags


def load_settings() -> Settings:
    plans = tuple(plan.lower() for plan in _csv("CHECKOUT_PLANS", "bronze,silver,gold"))
    methods = tuple(
        method for method in (m.upper() for m in _csv("CHECKOUT_METHODS", "POST")) if method in CHECKOUT_METHODS
    )
    min_length = _env("SUBJECT_ID_MIN_LENGTH", "0")
    return Settings(
        stripe_secret_key=_env("STRIPE_SECRET_KEY"),
        stripe_transport=_choice("STRIPE_TRANSPORT", STRIPE_TRANSPORTS, "sdk"),
        stripe_api_base=_env("STRIPE_API_BASE", "https://api.stripe.com").rstrip("/"),
        stripe_timeout_seconds=float(_env("STRIPE_TIMEOUT_SECONDS", "10")),
        plans=plans,
        plan_catalog=PlanCatalog({plan: _env(f"PRICE_{plan.upper()}") for plan in plans}),
        payment_link_catalog=PlanCatalog({plan: _env(f"PAYMENT_LINK_{plan.upper()}") for plan in plans}),
        success_url=_env("SUCCESS_URL"),
        cancel_url=_env("CANCEL_URL"),
        checkout_mode=_choice("CHECKOUT_MODE", CHECKOUT_MODES, "subscription"),
        checkout_methods=methods or ("POST",),
        response_mode=_choice("RESPONSE_MODE", RESPONSE_MODES, "json"),
        correlation_strategy=_choice("CORRELATION_STRATEGY", CORRELATION_STRATEGIES, "session_metadata"),
        correlation_metadata_key=_env("CORRELATION_METADATA_KEY", "userId"),
        subject_id_prefix=_env("SUBJECT_ID_PREFIX", "U"),
        subject_id_min_length=int(min_length) if min_length.isdigit() else 0,
        cors_allow_origins=_csv("CORS_ALLOW_ORIGINS", "*"),
        log_level=_env("LOG_LEVEL", "INFO").upper(),
    )


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    return load_settings()
