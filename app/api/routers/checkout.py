from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, Request
from fastapi.concurrency import run_in_threadpool
from fastapi.responses import JSONResponse, RedirectResponse, Response
from starlette.exceptions import HTTPException as StarletteHTTPException

from app.api.deps import get_app_settings, get_create_checkout_session_use_case
from app.api.schemas.checkout import CheckoutDebugResponse, CheckoutResponse
from app.application.dto.checkout import CheckoutDebugReport, CreateCheckoutInput
from app.application.use_cases.create_checkout_session import CreateCheckoutSessionUseCase
from app.domain.entities.checkout import CheckoutResult
from app.domain.exceptions import CheckoutError, ClientInputError, UnsupportedMethodError
from app.shared.config import Settings


logger = logging.getLogger(__name__)

router = APIRouter()

SUBJECT_ID_FIELDS = ("subjectId", "userId", "line_user_id", "lineUserId")
ROUTE_METHODS = ["GET", "HEAD", "POST", "OPTIONS"]
ALLOWED_HEADERS = "Content-Type, Authorization"


def cors_headers(settings: Settings, origin: str | None) -> dict[str, str]:
    headers = {
        "Access-Control-Allow-Methods": ", ".join([*settings.checkout_methods, "OPTIONS"]),
        "Access-Control-Allow-Headers": ALLOWED_HEADERS,
    }
    if "*" in settings.cors_allow_origins:
        headers["Access-Control-Allow-Origin"] = "*"
        return headers
    headers["Vary"] = "Origin"
    if origin and origin in settings.cors_allow_origins:
        headers["Access-Control-Allow-Origin"] = origin
    return headers


def _first_value(data: dict, fields: tuple[str, ...]) -> str:
    for name in fields:
        value = data.get(name)
        if value is not None and str(value).strip():
            return str(value)
    return ""


async def _extract_input(request: Request) -> CreateCheckoutInput:
    if request.method == "GET":
        data: object = dict(request.query_params)
    else:
        try:
            data = await request.json()
        except ValueError as exc:
            raise ClientInputError("Invalid JSON body") from exc
    if not isinstance(data, dict):
        raise ClientInputError("Invalid JSON body")

    return CreateCheckoutInput(
        subject_id=_first_value(data, SUBJECT_ID_FIELDS),
        plan=_first_value(data, ("plan",)),
        origin=request.headers.get("origin"),
    )


def _success_response(
    output: CheckoutResult | CheckoutDebugReport,
    *,
    settings: Settings,
    headers: dict[str, str],
) -> Response:
    if isinstance(output, CheckoutDebugReport):
        body = CheckoutDebugResponse(
            env=output.env,
            success_url=output.success_url,
            cancel_url=output.cancel_url,
            origin=output.origin,
        )
        return JSONResponse(body.model_dump(by_alias=True), headers=headers)

    if settings.response_mode == "redirect":
        return RedirectResponse(output.url, status_code=302, headers=headers)
    body = CheckoutResponse(url=output.url, id=output.session_id)
    return JSONResponse(body.model_dump(exclude_none=True), headers=headers)


def _error_response(exc: CheckoutError, headers: dict[str, str]) -> JSONResponse:
    content = {"ok": False, "error": exc.message, **exc.context}
    return JSONResponse(content, status_code=exc.status_code, headers=headers)


async def http_error_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    resolve_settings = request.app.dependency_overrides.get(get_app_settings, get_app_settings)
    settings = resolve_settings()
    headers = cors_headers(settings, request.headers.get("origin"))
    if exc.status_code == 405:
        headers["Allow"] = ", ".join([*settings.checkout_methods, "OPTIONS"])
        return _error_response(UnsupportedMethodError("Method Not Allowed", method=request.method), headers)
    content = {"ok": False, "error": str(exc.detail)}
    return JSONResponse(content, status_code=exc.status_code, headers=headers)


@router.api_route("/create-checkout-session", methods=ROUTE_METHODS)
@router.api_route("/api/create-checkout-session", methods=ROUTE_METHODS)
async def create_checkout_session(
    request: Request,
    settings: Settings = Depends(get_app_settings),
    use_case: CreateCheckoutSessionUseCase = Depends(get_create_checkout_session_use_case),
):
    headers = cors_headers(settings, request.headers.get("origin"))
    if request.method == "OPTIONS":
        return Response(status_code=204, headers=headers)

    try:
        if request.method not in settings.checkout_methods:
            raise UnsupportedMethodError("Method Not Allowed", method=request.method)
        use_case.ensure_configured()
        command = await _extract_input(request)
        output = await run_in_threadpool(use_case.execute, command)
    except CheckoutError as exc:
        if exc.status_code >= 500:
            logger.warning(
                "checkout_router: failed status=%s error=%s",
                exc.status_code,
                exc.message,
            )
        return _error_response(exc, headers)
    except Exception:  # noqa: BLE001
        logger.exception("checkout_router: unhandled_error method=%s", request.method)
        return JSONResponse(
            {"ok": False, "error": "Internal Server Error"},
            status_code=500,
            headers=headers,
        )

    return _success_response(output, settings=settings, headers=headers)


@router.get("/health")
def health():
    return {"ok": True}
