"""
Request pipeline stages.

Every stage has the shape of an HTTP middleware:

    async def stage(context, call_next) -> Response

A stage either answers directly (short-circuit) or awaits call_next(context)
and may post-process what comes back. Pipeline.run() chains the stages in
order and ends in the endpoint supplied by the dispatcher.

Default order: logging -> auth -> requirements -> validation.
"""

import json
import logging
import time
import uuid
from typing import Awaitable, Callable, List, Optional, Sequence

from fastapi.responses import JSONResponse
from starlette.responses import Response

from ..api import ErrorResponse
from ..auth import AuthenticationService
from ..capability import RequestValidationError
from .context import RequestContext
from .validation import SchemaValidator

logger = logging.getLogger("blockapi.pipeline")
access_logger = logging.getLogger("blockapi.access")

REQUEST_ID_HEADER = "x-request-id"

Endpoint = Callable[[RequestContext], Awaitable[Response]]
Stage = Callable[[RequestContext, Endpoint], Awaitable[Response]]


def error_response(
    status_code: int, message: str, field: Optional[str] = None, code: Optional[str] = None
) -> JSONResponse:
    """Standard error envelope: {"error": message} plus field/code when known."""
    envelope = ErrorResponse(error=message, field=field, code=code)
    return JSONResponse(status_code=status_code, content=envelope.model_dump(exclude_none=True))


class LoggingStage:
    """
    Assigns the request id and writes exactly one access record per request.

    The record is written whether the inner stages return normally or raise.
    """

    def __init__(self, log: Optional[logging.Logger] = None):
        self.log = log or access_logger

    async def __call__(self, context: RequestContext, call_next: Endpoint) -> Response:
        context.request_id = context.headers.get(REQUEST_ID_HEADER) or str(uuid.uuid4())
        start = time.perf_counter()
        status = 500
        failure: Optional[BaseException] = None

        try:
            response = await call_next(context)
            status = response.status_code
            response.headers[REQUEST_ID_HEADER] = context.request_id
            return response
        except BaseException as e:
            failure = e
            raise
        finally:
            record = {
                "event": "request",
                "req_id": context.request_id,
                "method": context.method,
                "path": context.path,
                "opcode": context.opcode,
                "status": status,
                "duration_ms": round((time.perf_counter() - start) * 1000, 2),
            }
            if failure is not None:
                record["error"] = str(failure) or type(failure).__name__
                self.log.error(json.dumps(record))
            else:
                self.log.info(json.dumps(record))


class AuthStage:
    """
    Bearer token check.

    A valid token always sets user_email, even on public routes. Routes that
    require auth are answered with 401 before any later stage runs.
    """

    def __init__(self, auth_service: AuthenticationService, log_attempts: bool = True):
        self.auth_service = auth_service
        self.log_attempts = log_attempts

    async def __call__(self, context: RequestContext, call_next: Endpoint) -> Response:
        definition = context.definition
        if definition is None:
            return await call_next(context)

        authorization = context.authorization
        result = None
        if authorization:
            result = await self.auth_service.authenticate(authorization)
            if result.ok:
                context.user_email = result.identity
                context.claims = result.claims

        if not definition.auth_required:
            return await call_next(context)

        if result is None:
            result = await self.auth_service.authenticate(None)
        if not result.ok:
            if self.log_attempts:
                logger.warning(
                    f"Rejected request {context.request_id} to {context.path}: {result.error}"
                )
            return error_response(401, result.error or "Authentication failed")

        if self.log_attempts:
            logger.debug(f"Request {context.request_id} authenticated for {result.identity}")
        return await call_next(context)


class RequirementsStage:
    """Answers 503 when a definition needs service modules that are not enabled."""

    async def __call__(self, context: RequestContext, call_next: Endpoint) -> Response:
        definition = context.definition
        if definition is None or not definition.required_modules or context.services is None:
            return await call_next(context)

        missing = context.services.missing_modules(definition.required_modules)
        if missing:
            return error_response(503, f"Required modules not available: {', '.join(missing)}")
        return await call_next(context)


class ValidationStage:
    """Validates request data; the handler only ever sees validated_body."""

    def __init__(self, validator: Optional[SchemaValidator] = None):
        self.validator = validator or SchemaValidator()

    async def __call__(self, context: RequestContext, call_next: Endpoint) -> Response:
        definition = context.definition
        if definition is None:
            return await call_next(context)

        try:
            validated = self.validator.validate(definition, context)
        except RequestValidationError as e:
            logger.info(f"Validation failed for {context.path} ({context.request_id}): {e.message}")
            return error_response(400, e.message, field=e.field)

        context.validated_body = validated
        return await call_next(context)


class Pipeline:
    """Ordered stages run in front of every handler."""

    def __init__(self, stages: Sequence[Stage]):
        self.stages: List[Stage] = list(stages)

    async def run(self, context: RequestContext, endpoint: Endpoint) -> Response:
        """Run the stages in order, ending in endpoint."""

        async def call(index: int, ctx: RequestContext) -> Response:
            if index >= len(self.stages):
                return await endpoint(ctx)
            stage = self.stages[index]
            return await stage(ctx, lambda next_ctx: call(index + 1, next_ctx))

        return await call(0, context)


def create_pipeline(
    auth_service: AuthenticationService,
    validator: Optional[SchemaValidator] = None,
    log_attempts: bool = True,
) -> Pipeline:
    """
    Factory function for the default pipeline.

    Args:
        auth_service: Service validating bearer tokens
        validator: Schema validator (default: SchemaValidator())
        log_attempts: Whether to log authentication attempts

    Returns:
        Pipeline running logging, auth, requirements and validation stages
    """
    return Pipeline([
        LoggingStage(),
        AuthStage(auth_service, log_attempts=log_attempts),
        RequirementsStage(),
        ValidationStage(validator),
    ])
