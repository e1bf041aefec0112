import logging

from fastapi import FastAPI, Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from sqlalchemy.exc import DBAPIError, OperationalError
from starlette.exceptions import HTTPException as StarletteHTTPException

from wenlock.exceptions import HospitalError, TransientInfraError

logger = logging.getLogger(__name__)

UNAVAILABLE_MESSAGE = "Service temporarily unavailable"


def error_body(message: str, error=None) -> dict:
    body = {"message": message}
    if error is not None:
        body["error"] = error
    return body


def error_response(exc: HospitalError) -> JSONResponse:
    return JSONResponse(error_body(exc.message, exc.error), status_code=exc.status_code)


def register_exception_handlers(app: FastAPI) -> None:
    @app.exception_handler(HospitalError)
    async def hospital_error_handler(request: Request, exc: HospitalError) -> JSONResponse:
        if exc.status_code >= 500:
            logger.error("%s %s failed: %s", request.method, request.url.path, exc.message)
        return error_response(exc)

    @app.exception_handler(StarletteHTTPException)
    async def http_exception_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
        # exc.detail can be str/dict/list
        message = exc.detail if isinstance(exc.detail, str) else "Request failed"
        return JSONResponse(error_body(message), status_code=exc.status_code, headers=exc.headers)

    @app.exception_handler(RequestValidationError)
    async def validation_exception_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
        errors = [
            {"field": ".".join(str(part) for part in err.get("loc", ())[1:]), "message": err.get("msg")}
            for err in exc.errors()
        ]
        return JSONResponse(error_body("Validation error", jsonable_encoder(errors)), status_code=400)

    @app.exception_handler(OperationalError)
    @app.exception_handler(DBAPIError)
    async def database_error_handler(request: Request, exc: DBAPIError) -> JSONResponse:
        logger.error("Database unavailable during %s %s: %s", request.method, request.url.path, exc)
        return error_response(TransientInfraError(UNAVAILABLE_MESSAGE, type(exc).__name__))

    @app.exception_handler(TimeoutError)
    @app.exception_handler(ConnectionError)
    async def infra_error_handler(request: Request, exc: Exception) -> JSONResponse:
        logger.error("Infrastructure failure during %s %s: %r", request.method, request.url.path, exc)
        return error_response(TransientInfraError(UNAVAILABLE_MESSAGE, type(exc).__name__))

    @app.exception_handler(Exception)
    async def unhandled_exception_handler(request: Request, exc: Exception) -> JSONResponse:
        logger.exception("Unhandled error during %s %s", request.method, request.url.path)
        return JSONResponse(error_body("Server error", str(exc)), status_code=500)
