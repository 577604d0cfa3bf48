"""FastAPI application entry point"""
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from prometheus_fastapi_instrumentator import Instrumentator
from slowapi.errors import RateLimitExceeded

from provision import __version__
from provision.api import access, accounts, adm, assets, health, users
from provision.api.deps import get_store
from provision.config import settings
from provision.errors import ProvisionError
from provision.middleware.rate_limit import limiter
from provision.utils.logger import logger, setup_logging

# Setup logging
setup_logging(settings.LOG_LEVEL)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan handler"""
    logger.info("Provision starting up", extra={"action": "startup"})

    if settings.SEND_TEMPLATES:
        store = app.dependency_overrides.get(get_store, get_store)()
        try:
            store.ensure_templates()
        except ProvisionError:
            logger.error("Failed to install index templates", exc_info=True)
            raise

    yield
    logger.info("Provision shutting down", extra={"action": "shutdown"})


app = FastAPI(
    title="Provision",
    description="Accounts, users and assets with role and account scoped access",
    version=__version__,
    docs_url="/docs",
    redoc_url="/redoc",
    lifespan=lifespan,
)

# ===== Middleware Setup =====

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins_list,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

if settings.METRICS_ENABLED:
    from provision.middleware.monitoring import MonitoringMiddleware
    app.add_middleware(MonitoringMiddleware)

    instrumentator = Instrumentator(
        should_group_status_codes=True,
        should_ignore_untemplated=True,
        should_respect_env_var=True,
        excluded_handlers=["/metrics", "/health", "/health/ready", "/health/live"],
    )
    instrumentator.instrument(app)
    instrumentator.expose(app, endpoint=settings.METRICS_PATH, include_in_schema=False)

app.state.limiter = limiter


@app.exception_handler(RateLimitExceeded)
async def rate_limit_handler(request: Request, exc: RateLimitExceeded):
    """Handle rate limit exceeded errors"""
    logger.warning("Rate limit exceeded", extra={"action": "rate_limit"})
    return JSONResponse(
        status_code=429,
        content={
            "error": "RateLimitExceeded",
            "message": "Too many requests. Please try again later.",
        },
    )

# ===== Route Setup =====

app.include_router(health.router)
app.include_router(users.router)
app.include_router(accounts.router)
app.include_router(assets.router)
app.include_router(access.router)
app.include_router(adm.router)


@app.get("/")
def root():
    """Root endpoint"""
    return {
        "service": "Provision",
        "version": __version__,
        "status": "operational",
        "docs": "/docs",
        "health": "/health",
    }


@app.get("/prefix")
def prefix():
    """The prefix of the user, account and asset indexes"""
    return {"prefix": settings.SYSTEM_PREFIX}


# ===== Error Handlers =====

@app.exception_handler(ProvisionError)
async def provision_error_handler(request: Request, exc: ProvisionError):
    """Answer engine errors with their status and error code"""
    log = logger.error if exc.status_code >= 500 else logger.warning
    log(f"{exc.code}: {exc.message}", extra={"action": request.url.path, "status": exc.status_code})
    return JSONResponse(
        status_code=exc.status_code,
        content={"error": exc.code, "message": exc.message},
    )


@app.exception_handler(Exception)
async def global_exception_handler(request: Request, exc: Exception):
    """Global exception handler for uncaught errors"""
    logger.error(
        f"Unhandled exception: {str(exc)}",
        extra={"action": request.url.path},
        exc_info=True,
    )
    return JSONResponse(
        status_code=500,
        content={
            "error": "InternalServerError",
            "message": "An unexpected error occurred.",
        },
    )


if __name__ == "__main__":
    import uvicorn

    uvicorn.run("provision.main:app", host=settings.HOST, port=settings.PORT, log_level=settings.LOG_LEVEL.lower())
