"""FastAPI application factory and setup."""

import time
import uuid
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from loguru import logger
from starlette.responses import JSONResponse

from src.authgate.api.http.app_data import ApplicationDependencies
from src.authgate.api.http.routers import health, registration, tools
from src.authgate.api.utils.app_startup import (
    build_application_dependencies,
    configure_logging,
)
from src.authgate.core.errors import AuthGateError
from src.authgate.runtime.config.config_data import ConfigData
from src.authgate.runtime.config.config_template import load_templated_yaml
from src.authgate.runtime.settings import EnvironmentVariables


async def auth_gate_error_handler(request: Request, exc: AuthGateError) -> JSONResponse:
    """Reason-coded denial; never leaks the underlying exception."""
    logger.bind(
        status_code=exc.status_code, reason=exc.reason.value, path=request.url.path
    ).info("request.denied: {}", exc.message)
    return JSONResponse(status_code=exc.status_code, content=exc.to_payload())


async def log_requests(request: Request, call_next):
    request_id = request.headers.get("X-Request-ID") or str(uuid.uuid4())
    base_ctx = {
        "request_id": request_id,
        "method": request.method,
        "path": request.url.path,
        "client_ip": request.client.host if request.client else "unknown",
    }

    start = time.perf_counter()
    with logger.contextualize(**base_ctx):
        logger.info("request.start")
        try:
            response = await call_next(request)
        except Exception as exc:
            duration_ms = (time.perf_counter() - start) * 1000
            logger.bind(
                status_code=500,
                duration_ms=round(duration_ms, 1),
                error_type=type(exc).__name__,
            ).exception("request.error")
            return JSONResponse(
                status_code=500,
                content={"error": "internal_error", "request_id": request_id},
                headers={"X-Request-ID": request_id},
            )

        duration_ms = (time.perf_counter() - start) * 1000
        logger.bind(
            status_code=response.status_code, duration_ms=round(duration_ms, 1)
        ).info("request.end")
        response.headers.setdefault("X-Request-ID", request_id)
        return response


def create_app(
    config: ConfigData,
    dependencies: ApplicationDependencies | None = None,
) -> FastAPI:
    """Build the HTTP surface.

    When ``dependencies`` is not given the pipeline is wired during startup,
    so a misconfigured mode stops the process before it serves requests.
    """

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        if getattr(app.state, "app_dependencies", None) is None:
            app.state.app_dependencies = build_application_dependencies(config)
        deps: ApplicationDependencies = app.state.app_dependencies
        logger.info(
            "Starting up {} in {} environment (auth mode {})",
            config.app.name,
            config.app.environment,
            deps.mode.value,
        )
        try:
            yield
        finally:
            logger.info("Shutting down application")
            deps.database_service.dispose()

    production = config.app.environment == "production"
    app = FastAPI(
        title=config.app.name,
        lifespan=lifespan,
        docs_url=None if production else "/docs",
        redoc_url=None if production else "/redoc",
    )
    app.state.app_dependencies = dependencies

    app.add_exception_handler(AuthGateError, auth_gate_error_handler)
    app.middleware("http")(log_requests)

    app.include_router(health.router)
    app.include_router(tools.router)
    app.include_router(registration.router)
    return app


def app_factory() -> FastAPI:
    """Entry point for ``uvicorn --factory``: settings, config, logging, app."""
    settings = EnvironmentVariables()
    config = load_templated_yaml(settings.config_file)
    configure_logging(config, settings.log_level)
    return create_app(config)
