import asyncio
import logging

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from sqlalchemy.exc import OperationalError

from authority.app.errors import ErrorCode, ServiceUnavailableError
from .error import ClientError, ServerError

logger = logging.getLogger(__name__)

UNAVAILABLE = {
    "error": {
        "code": ErrorCode.SERVICE_UNAVAILABLE,
        "message": "Service temporarily unavailable, please retry",
    }
}


async def handle_client_error(request: Request, exc: ClientError):
    error_dict = {"code": exc.base_error.code, "message": exc.base_error.message}
    logger.warning(f"Client error: {error_dict}")
    return JSONResponse(
        status_code=exc.status_code, content={"error": error_dict}, headers=exc.headers
    )


async def handle_server_error(request: Request, exc: ServerError):
    error_dict = {"code": exc.base_error.code, "message": "Internal server error"}
    logger.error(f"Server error: {exc.base_error.code}")
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, content={"error": error_dict}
    )


async def handle_validation_error(request: Request, exc: RequestValidationError):
    errors = exc.errors()
    first = errors[0] if errors else {}
    field = ".".join(str(part) for part in first.get("loc", ())[1:])
    message = f"{field}: {first.get('msg')}" if field else "Invalid request body"
    error_dict = {"code": ErrorCode.INVALID_INPUT, "message": message}
    logger.warning(f"Validation error on {request.url.path}: {message}")
    return JSONResponse(status_code=status.HTTP_400_BAD_REQUEST, content={"error": error_dict})


async def handle_unavailable(request: Request, exc: Exception):
    logger.error(f"Dependency unavailable on {request.url.path}: {type(exc).__name__}")
    return JSONResponse(status_code=status.HTTP_503_SERVICE_UNAVAILABLE, content=UNAVAILABLE)


def create_app(ApplicationConfig) -> FastAPI:
    app = FastAPI(title="Identity Authority", version="0.1.0")

    app.add_middleware(
        CORSMiddleware,
        allow_origins=ApplicationConfig.CORS_ORIGINS,
        allow_credentials=ApplicationConfig.CORS_ALLOW_CREDENTIALS,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    async def handle_unexpected(request: Request, exc: Exception):
        logger.exception(f"Unhandled error on {request.url.path}")
        message = "Internal server error"
        if ApplicationConfig.ENVIRONMENT == "development":
            message = f"{type(exc).__name__}: {exc}"
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content={"error": {"code": ErrorCode.INTERNAL_ERROR, "message": message}},
        )

    @app.middleware("http")
    async def bound_request_time(request: Request, call_next):
        try:
            return await asyncio.wait_for(
                call_next(request), timeout=ApplicationConfig.REQUEST_TIMEOUT_SECONDS
            )
        except asyncio.TimeoutError:
            logger.error(f"Request to {request.url.path} timed out")
            return JSONResponse(
                status_code=status.HTTP_503_SERVICE_UNAVAILABLE, content=UNAVAILABLE
            )

    from authority.api.routes import auth, health_check, sessions, two_factor, user

    app.include_router(health_check.router, tags=["Health"])
    app.include_router(auth.router, tags=["Authentication"])
    app.include_router(two_factor.router, tags=["Two-Factor"])
    app.include_router(user.router, tags=["User"])
    app.include_router(sessions.router, tags=["Sessions"])

    app.add_exception_handler(ClientError, handle_client_error)
    app.add_exception_handler(ServerError, handle_server_error)
    app.add_exception_handler(RequestValidationError, handle_validation_error)
    app.add_exception_handler(ServiceUnavailableError, handle_unavailable)
    app.add_exception_handler(OperationalError, handle_unavailable)
    app.add_exception_handler(Exception, handle_unexpected)

    return app
