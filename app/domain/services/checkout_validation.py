from __future__ import annotations

from urllib.parse import parse_qsl, urlencode, urlsplit, urlunsplit

from app.domain.exceptions import ClientInputError, ConfigurationError


SESSION_ID_PLACEHOLDER = "{CHECKOUT_SESSION_ID}"
DEBUG_PLAN = "debug"


def validate_subject_id(subject_id: str, *, prefix: str, min_length: int) -> str:
    value = (subject_id or "").strip()
    if not value or (prefix and not value.startswith(prefix)):
        raise ClientInputError(
            f"subjectId is required (LINE userId like '{prefix or 'U'}xxxx')",
            subjectId=value,
        )
    if min_length and len(value) < min_length:
        raise ClientInputError(
            "subjectId is too short",
            subjectId=value,
            minLength=min_length,
        )
    return value


def normalize_plan(plan: str) -> str:
    value = (plan or "").strip().lower()
    if not value:
        raise ClientInputError("plan is required", plan=value)
    return value


def is_absolute_url(value: str) -> bool:
    try:
        parts = urlsplit(value)
    except ValueError:
        return False
    return parts.scheme in ("http", "https") and bool(parts.netloc)


def require_absolute_url(value: str, *, key: str) -> str:
    if not is_absolute_url(value):
        raise ConfigurationError(f"Invalid env: {key} must be an absolute URL", key=key)
    return value


def with_session_id_placeholder(success_url: str) -> str:
    # urlencode would escape the braces Stripe looks for, so append by hand.
    if SESSION_ID_PLACEHOLDER in success_url:
        return success_url
    parts = urlsplit(success_url)
    param = f"session_id={SESSION_ID_PLACEHOLDER}"
    query = f"{parts.query}&{param}" if parts.query else param
    return urlunsplit((parts.scheme, parts.netloc, parts.path, query, parts.fragment))


def with_client_reference_id(link_url: str, subject_id: str) -> str:
    parts = urlsplit(link_url)
    query = [(k, v) for k, v in parse_qsl(parts.query, keep_blank_values=True) if k != "client_reference_id"]
    query.append(("client_reference_id", subject_id))
    return urlunsplit((parts.scheme, parts.netloc, parts.path, urlencode(query), parts.fragment))
