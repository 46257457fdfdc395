"""FastAPI application entry point."""

import logging
import uuid
from contextlib import asynccontextmanager

from fastapi import Depends, FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from slowapi import _rate_limit_exceeded_handler
from slowapi.errors import RateLimitExceeded
from slowapi.middleware import SlowAPIMiddleware
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from eventphoto.core.config import settings
from eventphoto.core.deps import get_db
from eventphoto.core.exceptions import DomainError
from eventphoto.core.rate_limit import limiter
from eventphoto.core.structured_logging import build_log_context, configure_logging
from eventphoto.db.session import dispose_engine

logger = logging.getLogger(__name__)

# ============================================================================
# Sentry Integration (optional, for production error tracking)
# ============================================================================

if settings.SENTRY_DSN and settings.ENV != "dev":
    import sentry_sdk
    from sentry_sdk.integrations.fastapi import FastApiIntegration
    from sentry_sdk.integrations.sqlalchemy import SqlalchemyIntegration

    sentry_sdk.init(
        dsn=settings.SENTRY_DSN,
        environment=settings.ENV,
        integrations=[
            FastApiIntegration(transaction_style="endpoint"),
            SqlalchemyIntegration(),
        ],
        traces_sample_rate=0.1,
        send_default_pii=False,  # participant emails and faces stay out of Sentry
    )
    logger.info("Sentry initialized for error tracking")


@asynccontextmanager
async def lifespan(app: FastAPI):
    configure_logging(settings.LOG_LEVEL)
    yield
    dispose_engine()


# ============================================================================
# FastAPI App
# ============================================================================

app = FastAPI(
    title="Event Photo API",
    description="Multi-tenant event photography: events, photos, participants and face matching",
    version=settings.VERSION,
    docs_url="/docs" if settings.ENV == "dev" else None,
    redoc_url="/redoc" if settings.ENV == "dev" else None,
    lifespan=lifespan,
)

app.state.limiter = limiter
app.add_exception_handler(RateLimitExceeded, _rate_limit_exceeded_handler)
# Applies DEFAULT_LIMITS to every route not decorated or exempted
app.add_middleware(SlowAPIMiddleware)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins_list,
    allow_credentials=True,  # Required for cookies
    allow_methods=["GET", "POST", "PUT", "PATCH", "DELETE", "OPTIONS"],
    allow_headers=["Content-Type", "X-Requested-With"],
    expose_headers=["X-Request-ID"],
)


@app.middleware("http")
async def request_id_middleware(request: Request, call_next):
    request_id = request.headers.get("X-Request-ID") or uuid.uuid4().hex
    request.state.request_id = request_id
    response = await call_next(request)
    response.headers["X-Request-ID"] = request_id
    return response


@app.exception_handler(DomainError)
async def domain_error_handler(request: Request, exc: DomainError):
    if exc.status_code >= 500:
        logger.warning(
            "%s: %s",
            type(exc).__name__,
            exc.message,
            extra=build_log_context(
                request_id=getattr(request.state, "request_id", None),
                route=request.url.path,
                method=request.method,
            ),
        )
    return JSONResponse(status_code=exc.status_code, content=exc.to_dict())


# ============================================================================
# Routers
# ============================================================================

from eventphoto.routers import (  # noqa: E402
    auth,
    billing,
    consent,
    events,
    face_matching,
    organizations,
    participants,
    photos,
    webhooks,
)

app.include_router(auth.router, prefix="/auth", tags=["auth"])
app.include_router(organizations.router)
app.include_router(events.router)
app.include_router(participants.router)
app.include_router(photos.router)
app.include_router(face_matching.router)
app.include_router(consent.router)
app.include_router(billing.router)

# Inbound calls from the compute service and payment provider
app.include_router(webhooks.router, prefix="/webhooks", tags=["webhooks"])


@app.get("/health")
@limiter.exempt
def health(db: Session = Depends(get_db)):
    """Liveness plus store connectivity."""
    try:
        db.execute(text("SELECT 1"))
    except SQLAlchemyError:
        logger.exception("Health check failed")
        return JSONResponse(status_code=503, content={"status": "unhealthy", "db": "unreachable"})
    return {"status": "ok", "version": settings.VERSION}
