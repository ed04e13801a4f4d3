from __future__ import annotations

from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Mapping


@dataclass(frozen=True)
class PlanCatalog:
    """Plan name -> Stripe price id (or payment link URL), fixed at startup."""

    entries: Mapping[str, str] = field(default_factory=dict)

    def __post_init__(self) -> None:
        cleaned = {
            str(name).strip().lower(): str(value).strip()
            for name, value in dict(self.entries).items()
            if value and str(value).strip()
        }
        object.__setattr__(self, "entries", MappingProxyType(cleaned))

    def resolve(self, plan: str) -> str | None:
        return self.entries.get(plan.strip().lower())

    def __contains__(self, plan: object) -> bool:
        return isinstance(plan, str) and self.resolve(plan) is not None

    def __bool__(self) -> bool:
        return bool(self.entries)
