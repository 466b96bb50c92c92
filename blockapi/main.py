#!/usr/bin/env python3
"""
blockapi - Main Entry Point

This is the thin orchestration layer that:
1. Loads configuration
2. Wires the registry, loader, pipeline and dispatcher together
3. Loads the capability directory and serves every request through the dispatcher

All business logic is in the modules, following black box principles.
"""

import logging
from contextlib import asynccontextmanager
from typing import Optional

import uvicorn
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware

from blockapi import __version__
from blockapi.config.provider import ConfigProvider, EnvConfigProvider
from blockapi.logging_config import configure_logging, get_logging_config

# Import modules through their black box interfaces
from blockapi.modules.audit import create_audit_log
from blockapi.modules.auth import AuthFactory
from blockapi.modules.dispatch import Dispatcher
from blockapi.modules.loader import DynamicLoader
from blockapi.modules.pipeline import create_pipeline, error_response
from blockapi.modules.registry import Registry
from blockapi.modules.services import Services

# Configuration provider (centralized config access)
config_provider: ConfigProvider = EnvConfigProvider()

# Configure logging with health check suppression
configure_logging(config_provider.get_api_config().log_level)
logger = logging.getLogger("blockapi.main")

# Every verb reaches the dispatcher; unrouted ones get 404/405 envelopes
DISPATCH_METHODS = ["GET", "POST", "PUT", "PATCH", "DELETE", "HEAD", "OPTIONS"]


def build_services(provider: ConfigProvider) -> Services:
    """
    Build one independent runtime: registry, loader, auth and audit.

    Args:
        provider: Configuration provider

    Returns:
        Services locator owning the new instances
    """
    registry_config = provider.get_registry_config()

    registry = Registry()
    audit = create_audit_log(provider.get_audit_config())
    loader = DynamicLoader(registry, audit=audit, scratch_dir=registry_config.scratch_dir)
    auth_service = AuthFactory.build(provider)

    return Services(
        registry=registry,
        loader=loader,
        auth=auth_service,
        audit=audit,
        enabled_modules=frozenset(registry_config.enabled_modules),
        version=__version__,
    )


def create_app(provider: Optional[ConfigProvider] = None) -> FastAPI:
    """
    Create the FastAPI application.

    Every call builds a fresh registry, so separate apps (one per test, for
    instance) never share definitions.

    Args:
        provider: Configuration provider (default: environment)

    Returns:
        Configured FastAPI application
    """
    provider = provider or config_provider
    api_config = provider.get_api_config()
    registry_config = provider.get_registry_config()

    services = build_services(provider)
    pipeline = create_pipeline(services.auth)
    dispatcher = Dispatcher(services.registry, pipeline, services)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        """
        Manage application lifecycle - load capabilities and cleanup resources.
        """
        logger.info("Starting blockapi...")

        if registry_config.endpoints_dir:
            loaded = await services.registry.load_from_directory(
                registry_config.endpoints_dir,
                services.loader,
                reserved_names=registry_config.reserved_names,
            )
            logger.info(f"Registered {len(loaded)} endpoints at startup")
        else:
            logger.warning("No endpoint directory configured - starting with an empty registry")

        yield

        # Shutdown
        logger.info("Shutting down blockapi...")
        await services.audit.close()
        logger.info("blockapi shutdown complete")

    app = FastAPI(
        title="blockapi",
        description="Endpoint registry and dispatch runtime with hot registration",
        version=__version__,
        lifespan=lifespan,
    )
    app.state.services = services
    app.state.dispatcher = dispatcher

    app.add_middleware(
        CORSMiddleware,
        allow_origins=api_config.cors_origins,
        allow_credentials=False,
        allow_methods=["*"],
        allow_headers=["*"],
        expose_headers=["x-request-id"],
    )

    @app.get("/healthz", include_in_schema=False)
    async def healthz():
        """
        Minimal health check endpoint for liveness probes.

        Lives outside the registry, so it answers even with no capabilities loaded.
        """
        return {"status": "ok"}

    @app.api_route("/{path:path}", methods=DISPATCH_METHODS, include_in_schema=False)
    async def dispatch(request: Request):
        """Every other request is resolved against the capability registry."""
        return await request.app.state.dispatcher.dispatch(request)

    @app.exception_handler(Exception)
    async def unhandled_error_handler(request: Request, exc: Exception):
        """Handle errors that escaped the dispatcher."""
        logger.error(f"Unhandled error for {request.method} {request.url.path}: {exc}")
        return error_response(500, "Internal server error")

    return app


app = create_app()


if __name__ == "__main__":
    api_config = config_provider.get_api_config()
    # Use dict config for logging, not file path
    uvicorn.run(
        "blockapi.main:app",
        host=api_config.host,
        port=api_config.port,
        log_level=api_config.log_level.lower(),
        reload=api_config.debug,
        log_config=get_logging_config(api_config.log_level),
    )
