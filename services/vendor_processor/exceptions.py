"""
Where: services/vendor_processor/exceptions.py
What: Exception handler registration for the event ingress.
Why: Failed deliveries must reach the bus adapter as non-2xx responses.
"""

import logging

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from pydantic import ValidationError

from services.common.core.exceptions import DeploymentError, UnknownEventError

logger = logging.getLogger("vendor_processor.exceptions")


async def unknown_event_handler(request: Request, exc: UnknownEventError):
    return JSONResponse(
        status_code=status.HTTP_404_NOT_FOUND,
        content={"message": str(exc), "known_events": exc.known},
    )


async def event_validation_handler(request: Request, exc: ValidationError):
    return JSONResponse(
        status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
        content={
            "message": "Validation Error",
            "detail": exc.errors(include_url=False, include_context=False, include_input=False),
        },
    )


async def request_validation_handler(request: Request, exc: RequestValidationError):
    return JSONResponse(
        status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
        content={"message": "Validation Error", "detail": str(exc.errors())},
    )


async def deployment_error_handler(request: Request, exc: DeploymentError):
    return JSONResponse(
        status_code=status.HTTP_502_BAD_GATEWAY,
        content={
            "message": "Deployment failed",
            "detail": str(exc),
            "container_name": exc.container_name,
            "image": exc.image,
        },
    )


async def global_exception_handler(request: Request, exc: Exception):
    """
    Catch-all handler for unhandled exceptions.
    """
    logger.error(
        f"Global exception handler caught: {exc}",
        exc_info=True,
        extra={
            "path": request.url.path,
            "method": request.method,
        },
    )
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={"message": "Internal Server Error", "detail": str(exc)},
    )


def register_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(Exception, global_exception_handler)
    app.add_exception_handler(RequestValidationError, request_validation_handler)
    app.add_exception_handler(ValidationError, event_validation_handler)
    app.add_exception_handler(UnknownEventError, unknown_event_handler)
    app.add_exception_handler(DeploymentError, deployment_error_handler)
