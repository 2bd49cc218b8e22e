"""gamebox FastAPI application."""

from __future__ import annotations

import logging

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from gamebox.api import admin, appeals, follows, health, notifications, reviews
from gamebox.core.config import settings
from gamebox.core.errors import TrustError

app = FastAPI(
    title=settings.app_name,
    debug=settings.debug,
)

logging.basicConfig(
    level=logging.DEBUG if settings.debug else logging.INFO,
    format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
)


@app.exception_handler(TrustError)
def trust_error_handler(request: Request, exc: TrustError) -> JSONResponse:
    """Map service errors to a stable status code and error kind."""
    return JSONResponse(
        status_code=exc.status_code,
        content={"error": exc.kind, "detail": exc.detail, **exc.extra},
    )


app.include_router(health.router)
app.include_router(admin.router)
app.include_router(follows.router)
app.include_router(reviews.router)
app.include_router(appeals.router)
app.include_router(notifications.router)
