"""
Main FastAPI application entry point.
"""
import asyncio
import logging
import multiprocessing
import os
import signal
from contextlib import asynccontextmanager

import uvicorn
from fastapi import Depends, FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware

from app.core.config import settings
from app.core.database import dispose_engine
from app.core.error_handling import register_exception_handlers
from app.core.security import security_headers
from app.dependencies import rate_limit
from app.helpers.migrations import apply_migrations
from app.managers.redis_manager import redis_manager
from app.routers import coupons, health, mail, membership, payments

# Configure logging
logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)


def handle_loop_exception(loop, context):
    """Treat unhandled task errors as fatal: log them and ask the server to shut down."""
    error = context.get("exception", context.get("message"))
    logger.critical(f"Unhandled error in event loop: {error}", exc_info=context.get("exception"))
    os.kill(os.getpid(), signal.SIGTERM)


@asynccontextmanager
async def lifespan(app: FastAPI):
    logger.info(f"Starting up ({settings.ENVIRONMENT})...")
    if settings.RUN_MIGRATIONS:
        logger.info("Run alembic upgrade head...")
        process = multiprocessing.Process(target=apply_migrations)
        process.start()
        process.join()
        if process.exitcode != 0:
            raise RuntimeError(f"Database migrations failed (exit code {process.exitcode})")
        logger.info("Finished alembic upgrade.")

    if not await redis_manager.ping():
        logger.warning("Redis unavailable at startup; rate limiting is disabled until it recovers")

    asyncio.get_running_loop().set_exception_handler(handle_loop_exception)

    yield

    logger.info("Shutting down...")
    await redis_manager.close()
    await dispose_engine()


app = FastAPI(
    title=settings.PROJECT_NAME,
    description="API for coupons, memberships, payments and welcome mail",
    version=settings.VERSION,
    openapi_url="/openapi.json",
    lifespan=lifespan,
    debug=False,
    docs_url="/docs",
    redoc_url="/redoc",
    dependencies=[Depends(rate_limit)],
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.allowed_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.middleware("http")
async def add_security_headers(request: Request, call_next):
    response = await call_next(request)
    for name, value in security_headers().items():
        response.headers.setdefault(name, value)
    return response


register_exception_handlers(app)

# Include routers
app.include_router(coupons.router, prefix="/api/coupons", tags=["Coupons"])
app.include_router(membership.router, prefix="/api/membership", tags=["Membership"])
app.include_router(payments.router, prefix="/api/pay", tags=["Payments"])
app.include_router(mail.router, prefix="/api", tags=["Mail"])
app.include_router(health.router, prefix="/health", tags=["HealthCheck"])


@app.get("/")
async def root():
    return {
        "message": "Coupon API Server is running",
        "version": settings.VERSION,
        "environment": settings.ENVIRONMENT,
        "endpoints": {
            "health": "/health",
            "coupons": "/api/coupons",
        },
    }


def run():
    uvicorn.run("app.main:app", host=settings.HOST, port=settings.PORT)


if __name__ == "__main__":
    run()
