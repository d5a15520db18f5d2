from fastapi import FastAPI, Request
from fastapi.exception_handlers import request_validation_exception_handler
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from sqlalchemy.exc import SQLAlchemyError
import logging

from .exceptions import StandStrongException, BadRequestError

logger = logging.getLogger(__name__)

def _is_identifier_error(error: dict) -> bool:
    """Path parameters and ``*_id`` fields are identifiers"""
    loc = error.get("loc", ())
    if loc and loc[0] == "path":
        return True
    return any(isinstance(part, str) and (part == "id" or part.endswith("_id")) for part in loc[1:])

async def standstrong_exception_handler(request: Request, exc: StandStrongException):
    """Handle request-level failures raised by services"""
    logger.warning(f"{exc.error}: {exc.message} - Path: {request.url.path}")
    return JSONResponse(
        status_code=exc.status_code,
        content=exc.detail,
        headers=exc.headers
    )

async def validation_exception_handler(request: Request, exc: RequestValidationError):
    """Malformed or missing identifiers are bad requests; other payload errors stay 422"""
    id_errors = [error for error in exc.errors() if _is_identifier_error(error)]
    if not id_errors:
        return await request_validation_exception_handler(request, exc)

    error = id_errors[0]
    field = ".".join(str(part) for part in error["loc"][1:]) or error["loc"][0]
    message = f"Invalid {field}: {error['msg']}"
    logger.warning(f"{BadRequestError.error}: {message} - Path: {request.url.path}")
    return JSONResponse(
        status_code=BadRequestError.status_code,
        content={"error": BadRequestError.error, "message": message}
    )

async def database_exception_handler(request: Request, exc: SQLAlchemyError):
    """Store failures are infrastructure errors, not validation errors"""
    logger.error(f"Database error: {exc} - Path: {request.url.path}")
    return JSONResponse(
        status_code=503,
        content={"error": "Service Unavailable", "message": "The data store is unavailable, try again later"}
    )

async def general_exception_handler(request: Request, exc: Exception):
    """Handle general exceptions"""
    logger.exception(f"Unexpected error: {str(exc)} - Path: {request.url.path}")
    return JSONResponse(
        status_code=500,
        content={"error": "Internal Server Error", "message": "An unexpected error occurred"}
    )

def register_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(StandStrongException, standstrong_exception_handler)
    app.add_exception_handler(RequestValidationError, validation_exception_handler)
    app.add_exception_handler(SQLAlchemyError, database_exception_handler)
    app.add_exception_handler(Exception, general_exception_handler)
