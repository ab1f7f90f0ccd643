"""Exception handlers producing the common error envelope."""

import fastapi
from fastapi import Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from sqlalchemy.exc import SQLAlchemyError
from starlette.exceptions import HTTPException as StarletteHTTPException

from components.core.exceptions import ServerError, TuitionPayError
from components.core.logging_config import logger


async def handle_service_error(request: Request, exc: TuitionPayError) -> JSONResponse:
    if exc.status_code >= 500:
        logger.error(f"{request.method} {request.url.path} failed: {exc.code}: {exc.message}")
    headers = {"WWW-Authenticate": "Bearer"} if exc.status_code == 401 else None
    return JSONResponse(status_code=exc.status_code, content=exc.to_dict(), headers=headers)


async def handle_http_error(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    return JSONResponse(
        status_code=exc.status_code,
        content={"success": False, "message": str(exc.detail), "code": None, "details": {}},
        headers=getattr(exc, "headers", None),
    )


async def handle_request_validation_error(request: Request, exc: RequestValidationError) -> JSONResponse:
    errors = [
        {"loc": [str(part) for part in error.get("loc", ())], "message": error.get("msg", "")}
        for error in exc.errors()
    ]
    return JSONResponse(
        status_code=400,
        content={
            "success": False,
            "message": "Invalid request",
            "code": "VALIDATION_ERROR",
            "details": {"errors": errors},
        },
    )


async def handle_storage_error(request: Request, exc: SQLAlchemyError) -> JSONResponse:
    # Driver text stays in the log, never in the response
    logger.error(f"Storage failure on {request.method} {request.url.path}: {type(exc).__name__}", exc_info=exc)
    error = ServerError()
    return JSONResponse(status_code=error.status_code, content=error.to_dict())


def register_exception_handlers(app: fastapi.FastAPI) -> None:
    app.add_exception_handler(TuitionPayError, handle_service_error)
    app.add_exception_handler(StarletteHTTPException, handle_http_error)
    app.add_exception_handler(RequestValidationError, handle_request_validation_error)
    app.add_exception_handler(SQLAlchemyError, handle_storage_error)
