"""
FastAPI application entry point.
"""

from __future__ import annotations

import logging

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from sqlalchemy.exc import SQLAlchemyError

from tradedesk.config import get_settings
from tradedesk.errors import TradeDeskError
from tradedesk.routes import router

logger = logging.getLogger(__name__)


def _error_body(kind: str, message: str) -> dict:
    return {"error": kind, "message": message}


async def handle_tradedesk_error(request: Request, exc: TradeDeskError) -> JSONResponse:
    return JSONResponse(
        status_code=exc.status_code, content=_error_body(exc.kind, exc.message)
    )


async def handle_request_validation_error(
    request: Request, exc: RequestValidationError
) -> JSONResponse:
    errors = exc.errors()
    message = errors[0].get("msg", "Invalid request") if errors else "Invalid request"
    return JSONResponse(status_code=400, content=_error_body("validation_error", message))


async def handle_store_error(request: Request, exc: SQLAlchemyError) -> JSONResponse:
    logger.error("Store error on %s %s: %s", request.method, request.url.path, exc)
    return JSONResponse(
        status_code=503,
        content=_error_body("store_unavailable", "Request could not be completed"),
    )


def create_app() -> FastAPI:
    settings = get_settings()
    logging.basicConfig(
        level=settings.log_level.upper(),
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )
    app = FastAPI(title="TradeDesk", version="0.1.0")
    app.add_exception_handler(TradeDeskError, handle_tradedesk_error)
    app.add_exception_handler(RequestValidationError, handle_request_validation_error)
    app.add_exception_handler(SQLAlchemyError, handle_store_error)
    app.include_router(router, prefix=settings.api_prefix)
    return app


app = create_app()


if __name__ == "__main__":
    import uvicorn

    uvicorn.run("tradedesk.app:app", host="0.0.0.0", port=8000)
