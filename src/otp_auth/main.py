"""FastAPI application entry point."""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from otp_auth.api.auth import router as auth_router
from otp_auth.api.errors import register_exception_handlers
from otp_auth.api.health import router as health_router
from otp_auth.api.users import router as users_router
from otp_auth.config import Settings, settings
from otp_auth.database.engine import build_engine, init_db
from otp_auth.services.expiring_store import ExpiringStore
from otp_auth.services.otp_service import OTPService
from otp_auth.services.rate_limiter import SlidingWindowRateLimiter
from otp_auth.services.token_issuer import TokenIssuer

logging.basicConfig(
    level=logging.DEBUG if settings.debug else logging.INFO,
    format="%(asctime)s | %(levelname)-8s | %(name)s | %(message)s",
)

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Startup / shutdown lifecycle hook."""
    cfg: Settings = app.state.settings
    logger.info("Starting %s …", cfg.app_name)
    if not cfg.secret_key or not cfg.access_expiry:
        logger.warning("SECRET_KEY or ACCESS_EXPIRY not set — token issuance will fail")
    await init_db(app.state.engine)
    logger.info("Database initialised")
    app.state.otp_store.start()
    try:
        yield
    finally:
        app.state.otp_store.stop()
        await app.state.engine.dispose()
        logger.info("Shutting down %s …", cfg.app_name)


def create_app(cfg: Settings | None = None) -> FastAPI:
    """Build the application and its shared in-memory components."""
    cfg = cfg or settings

    app = FastAPI(
        title=cfg.app_name,
        description="Phone-number authentication with one-time passcodes",
        version="0.1.0",
        lifespan=lifespan,
    )

    engine, session_factory = build_engine(cfg)
    otp_store: ExpiringStore[str] = ExpiringStore(
        sweep_interval=cfg.store_sweep_interval_seconds
    )
    app.state.settings = cfg
    app.state.engine = engine
    app.state.session_factory = session_factory
    app.state.otp_store = otp_store
    app.state.rate_limiter = SlidingWindowRateLimiter()
    app.state.otp_service = OTPService(otp_store, ttl_seconds=cfg.otp_ttl_seconds)
    app.state.token_issuer = TokenIssuer.from_settings(cfg)

    # Credentials would require explicit origins
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_methods=["GET", "POST", "PUT", "DELETE", "OPTIONS", "PATCH"],
        allow_headers=["Accept", "Authorization", "Content-Type"],
        allow_credentials=False,
        max_age=300,
    )

    register_exception_handlers(app)
    app.include_router(auth_router)
    app.include_router(users_router)
    app.include_router(health_router)

    return app


app = create_app()
