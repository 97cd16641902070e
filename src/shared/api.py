"""HTTP mapping for domain errors, shared by every context's API."""

import structlog
from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from protean.exceptions import ObjectNotFoundError, ValidationError

from shared.errors import (
    BusinessRuleViolationError,
    ConcurrencyConflictError,
    InfrastructureError,
    TranslationError,
)

logger = structlog.get_logger(__name__)


async def business_rule_violation_handler(request: Request, exc: BusinessRuleViolationError):
    return JSONResponse(status_code=422, content={"code": exc.code, "message": exc.message})


async def validation_error_handler(request: Request, exc: ValidationError):
    return JSONResponse(status_code=422, content={"errors": exc.messages})


async def translation_error_handler(request: Request, exc: TranslationError):
    return JSONResponse(status_code=400, content={"message": exc.message, "field": exc.field})


async def not_found_handler(request: Request, exc: ObjectNotFoundError):
    return JSONResponse(status_code=404, content={"message": str(exc)})


async def concurrency_conflict_handler(request: Request, exc: ConcurrencyConflictError):
    return JSONResponse(
        status_code=409,
        content={"message": str(exc), "expected_version": exc.expected, "actual_version": exc.actual},
    )


async def infrastructure_error_handler(request: Request, exc: InfrastructureError):
    logger.error("Infrastructure failure", path=request.url.path, error=exc.message)
    return JSONResponse(status_code=503, content={"message": exc.message, "retryable": exc.retryable})


def register_exception_handlers(app: FastAPI) -> None:
    # Looked up along the exception MRO: rule violations before ValidationError
    app.add_exception_handler(BusinessRuleViolationError, business_rule_violation_handler)
    app.add_exception_handler(ValidationError, validation_error_handler)
    app.add_exception_handler(TranslationError, translation_error_handler)
    app.add_exception_handler(ObjectNotFoundError, not_found_handler)
    app.add_exception_handler(ConcurrencyConflictError, concurrency_conflict_handler)
    app.add_exception_handler(InfrastructureError, infrastructure_error_handler)
