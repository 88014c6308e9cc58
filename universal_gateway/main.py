import asyncio
import contextlib
import logging
import traceback
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from universal_gateway.api.routes import router
from universal_gateway.core.config import collect_config_warnings, settings
from universal_gateway.core.logging import setup_logging
from universal_gateway.core.metrics import metrics_response
from universal_gateway.gateway.maintenance import run_cache_cleanup
from universal_gateway.gateway.services import build_services
from universal_gateway.tools.registry import ToolRegistry

# Configure logging before anything else
setup_logging()

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    # Startup
    logger.info("Starting %s %s...", settings.app_name, settings.app_version)
    for warning in collect_config_warnings(settings):
        logger.warning("Configuration warning: %s", warning)

    services = build_services(settings)
    app.state.services = services
    app.state.tools = ToolRegistry(services)

    cleanup_task = asyncio.create_task(
        run_cache_cleanup(services.cache, services.metrics, settings.cache_cleanup_interval)
    )

    yield

    # Shutdown
    cleanup_task.cancel()
    with contextlib.suppress(asyncio.CancelledError):
        await cleanup_task
    logger.info("%s shut down", settings.app_name)


app = FastAPI(
    title=settings.app_name,
    description="API gateway with response caching, rate limiting and retries",
    version=settings.app_version,
    lifespan=lifespan,
    docs_url="/api/docs" if settings.app_debug else None,
    redoc_url="/api/redoc" if settings.app_debug else None,
)


# Log unhandled exceptions with their traceback
@app.exception_handler(Exception)
async def _unhandled_exception_handler(request: Request, exc: Exception):
    tb = traceback.format_exception(type(exc), exc, exc.__traceback__)
    logger.error("Unhandled %s on %s %s:\n%s", type(exc).__name__, request.method, request.url.path, "".join(tb))
    return JSONResponse(status_code=500, content={"detail": f"{type(exc).__name__}: {exc}"})


app.include_router(router)


@app.get("/metrics", include_in_schema=False)
async def prometheus_metrics():
    return metrics_response()
