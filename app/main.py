from __future__ import annotations

import logging

from fastapi import FastAPI
from starlette.exceptions import HTTPException as StarletteHTTPException

from app.api.routers.checkout import http_error_handler, router as checkout_router
from app.shared.config import get_settings


settings = get_settings()
logging.basicConfig(
    level=getattr(logging, settings.log_level, logging.INFO),
    format="%(asctime)s %(levelname)s %(name)s %(message)s",
)

app = FastAPI(title="Checkout API")
app.add_exception_handler(StarletteHTTPException, http_error_handler)
app.include_router(checkout_router)
