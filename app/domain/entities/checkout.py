from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class CheckoutRequest:
    subject_id: str
    plan: str


@dataclass(frozen=True)
class CorrelationMetadata:
    subject_id: str
    plan: str
    subject_key: str = "userId"

    def as_metadata(self) -> dict[str, str]:
        return {self.subject_key: self.subject_id, "plan": self.plan}


@dataclass(frozen=True)
class CheckoutResult:
    url: str
    session_id: str | None = None
