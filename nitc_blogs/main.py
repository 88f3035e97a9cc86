"""
NITC Blogs — FastAPI application entrypoint
"""
import logging
from contextlib import asynccontextmanager
from datetime import timedelta

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from prometheus_fastapi_instrumentator import Instrumentator

from nitc_blogs.api import auth, blogs, health, users
from nitc_blogs.api.errors import register_error_handlers
from nitc_blogs.core.clock import Clock, utcnow
from nitc_blogs.core.config import Settings, get_settings
from nitc_blogs.core.redis_client import close_redis, create_redis
from nitc_blogs.core.security import PasswordHasher, SessionIssuer
from nitc_blogs.core.tokens import TokenGenerator
from nitc_blogs.db.database import Database
from nitc_blogs.middleware.rate_limiter import SlidingWindowRateLimiter
from nitc_blogs.services.auth import AuthComponents
from nitc_blogs.services.email import Mailer, build_mailer


def build_auth_components(settings: Settings, mailer: Mailer, clock: Clock = utcnow) -> AuthComponents:
    return AuthComponents(
        hasher=PasswordHasher(rounds=settings.BCRYPT_ROUNDS),
        sessions=SessionIssuer(
            settings.JWT_SECRET_KEY,
            algorithm=settings.JWT_ALGORITHM,
            ttl=timedelta(minutes=settings.JWT_EXPIRE_MINUTES),
            clock=clock,
        ),
        signup_tokens=TokenGenerator(timedelta(minutes=settings.SIGNUP_TOKEN_TTL_MINUTES), clock=clock),
        reset_tokens=TokenGenerator(timedelta(minutes=settings.PASSWORD_RESET_TOKEN_TTL_MINUTES), clock=clock),
        mailer=mailer,
        clock=clock,
    )


def create_app(settings: Settings | None = None, clock: Clock = utcnow) -> FastAPI:
    settings = settings or get_settings()
    logging.basicConfig(
        level=settings.LOG_LEVEL.upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        # Startup: create tables (migrations are out of band in production)
        await app.state.db.create_all()
        yield
        # Shutdown
        await close_redis(app.state.redis)
        await app.state.db.dispose()

    app = FastAPI(
        title="NITC Blogs API",
        description="Blogging backend with email-verified accounts and JWT sessions.",
        version=settings.SERVICE_VERSION,
        lifespan=lifespan,
        docs_url="/docs" if settings.DEBUG else None,
        redoc_url=None,
    )

    # ── Process-wide collaborators (immutable after startup) ──────────────────
    app.state.settings = settings
    app.state.db = Database(settings.database_url, echo=settings.DEBUG)
    app.state.redis = create_redis(settings) if settings.RATE_LIMIT_ENABLED else None
    app.state.auth = build_auth_components(settings, build_mailer(settings), clock)

    # ── CORS ──────────────────────────────────────────────────────────────────
    app.add_middleware(
        CORSMiddleware,
        allow_origins=[settings.CLIENT_URL] if settings.is_production else ["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # ── Rate Limiting ─────────────────────────────────────────────────────────
    if settings.RATE_LIMIT_ENABLED:
        app.add_middleware(
            SlidingWindowRateLimiter,
            max_attempts=settings.RATE_LIMIT_MAX_ATTEMPTS,
            window_seconds=settings.RATE_LIMIT_WINDOW_SECONDS,
        )

    # ── Prometheus Metrics ────────────────────────────────────────────────────
    if settings.METRICS_ENABLED:
        Instrumentator().instrument(app).expose(app, endpoint="/metrics")

    register_error_handlers(app)

    # ── Routers ───────────────────────────────────────────────────────────────
    app.include_router(auth.router)
    app.include_router(users.router)
    app.include_router(blogs.router)
    app.include_router(health.router)

    @app.get("/")
    async def root():
        return {"service": settings.SERVICE_NAME, "version": settings.SERVICE_VERSION}

    return app


app = create_app()
