"""
Request dispatcher.

Turns an HTTP request into a RequestContext, resolves it against the route
table, runs the pipeline and finally the handler. The definition is looked up
once, when the route is resolved; a hot swap that lands while the request is
in flight does not change which handler it runs.
"""

import inspect
import json
import logging
from typing import Any, Optional

from fastapi import Request
from fastapi.concurrency import run_in_threadpool
from starlette.responses import Response

from ..capability import CapabilityDefinition, CapabilityError, RequestValidationError
from ..pipeline import Pipeline, RequestContext, error_response
from ..registry import Registry
from ..services import Services
from .responses import normalize_result, render_result

logger = logging.getLogger("blockapi.dispatch")

BODY_METHODS = ("POST", "PUT", "PATCH")


class Dispatcher:
    """Routes requests to capability handlers through the pipeline."""

    def __init__(self, registry: Registry, pipeline: Pipeline, services: Optional[Services] = None):
        """
        Initialize dispatcher.

        Args:
            registry: Registry (and its route table) requests are resolved against
            pipeline: Stages run in front of every handler
            services: Service locator exposed to handlers
        """
        self.registry = registry
        self.pipeline = pipeline
        self.services = services

    async def build_context(self, request: Request) -> RequestContext:
        """Capture everything the pipeline needs from the request."""
        context = RequestContext(
            method=request.method.upper(),
            path=request.url.path,
            headers={key.lower(): value for key, value in request.headers.items()},
            raw_query=dict(request.query_params),
            services=self.services,
        )

        if context.method in BODY_METHODS:
            body = await request.body()
            if body.strip():
                try:
                    context.raw_body = json.loads(body)
                except ValueError as e:
                    context.body_error = f"Invalid JSON body: {e}"

        return context

    def resolve(self, context: RequestContext) -> Optional[CapabilityDefinition]:
        """Attach the routed opcode and definition snapshot to the context."""
        opcode = self.registry.route_table.resolve(context.method, context.path)
        if opcode is None:
            return None
        definition = self.registry.get(opcode)
        if definition is None:
            # Removed between route lookup and definition lookup
            return None
        context.opcode = opcode
        context.definition = definition
        return definition

    async def dispatch(self, request: Request) -> Response:
        """Handle one HTTP request."""
        context = await self.build_context(request)
        definition = self.resolve(context)

        if definition is None:
            return await self.pipeline.run(context, self._unresolved)
        return await self.pipeline.run(context, self.invoke)

    async def _unresolved(self, context: RequestContext) -> Response:
        allowed = sorted(self.registry.route_table.allowed_methods(context.path))
        if allowed:
            response = error_response(405, f"Method not allowed. Expected {' or '.join(allowed)}")
            response.headers["allow"] = ", ".join(allowed)
            return response
        return error_response(404, "Not found")

    async def invoke(self, context: RequestContext) -> Response:
        """
        Terminal pipeline step: run the handler and render its result.

        Handler failures are converted to the error envelope here and never
        propagate to the transport.
        """
        definition = context.definition
        handler = definition.handler
        try:
            if inspect.iscoroutinefunction(handler):
                result: Any = await handler(context)
            else:
                # Sync handlers run off the event loop
                result = await run_in_threadpool(handler, context)
                if inspect.isawaitable(result):
                    result = await result
        except RequestValidationError as e:
            logger.info(
                f"Request {context.request_id} to {definition.path} rejected by handler: {e.message}"
            )
            return error_response(e.status_code, e.message, field=e.field, code=e.code)
        except CapabilityError as e:
            logger.warning(
                f"Handler for {definition.opcode!r} failed (request {context.request_id}): "
                f"{e.message}"
            )
            return error_response(e.status_code, e.message, code=e.code)
        except Exception as e:
            logger.exception(
                f"Unhandled error in handler for {definition.opcode!r} "
                f"(request {context.request_id}): {e}"
            )
            return error_response(500, str(e) or "Internal server error")

        return render_result(normalize_result(result))
