from contextlib import asynccontextmanager

import httpx
from fastapi import FastAPI, Request, status
from fastapi.responses import JSONResponse

from shop_finance.config import settings
from shop_finance.core.cors import APICORSMiddleware
from shop_finance.core.exceptions import FinanceTrackerException
from shop_finance.core.log_config import configure_logging, get_logger
from shop_finance.routes import (
    audit_log_routes,
    bill_routes,
    invite_routes,
    report_routes,
    savings_routes,
    session_routes,
    transaction_routes,
)

configure_logging(service_name=settings.APP_NAME, level=settings.LOG_LEVEL)
log = get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    missing = settings.missing_platform_settings
    if missing:
        # Data routes that need the identity provider will answer 500 until fixed.
        log.error("platform_misconfigured", missing=missing)

    app.state.http = httpx.AsyncClient(timeout=settings.PLATFORM_TIMEOUT)
    log.info("startup", version=settings.APP_VERSION)
    try:
        yield
    finally:
        await app.state.http.aclose()
        log.info("shutdown")


app = FastAPI(
    title=settings.APP_NAME,
    version=settings.APP_VERSION,
    docs_url="/docs" if settings.DEBUG else None,  # Disable in production
    redoc_url="/redoc" if settings.DEBUG else None,
    lifespan=lifespan,
)

FUNCTIONS_PREFIX = "/functions/v1"

# CORS middleware (functions set their own permissive headers)
cors_origins = settings.cors_origins_list
if cors_origins:
    app.add_middleware(
        APICORSMiddleware,
        exempt_prefixes=(FUNCTIONS_PREFIX,),
        allow_origins=cors_origins,
        allow_credentials=settings.CORS_ALLOW_CREDENTIALS,
        allow_methods=["*"],
        allow_headers=["*"],
    )


# Exception handlers
@app.exception_handler(FinanceTrackerException)
async def finance_tracker_exception_handler(request: Request, exc: FinanceTrackerException):
    headers = None
    if exc.status_code == status.HTTP_401_UNAUTHORIZED:
        headers = {"WWW-Authenticate": "Bearer"}
    if exc.status_code >= 500:
        log.error("request_failed", path=request.url.path, error=str(exc))
    return JSONResponse(
        status_code=exc.status_code, content={"detail": str(exc)}, headers=headers
    )


# Health check endpoint
@app.get("/health")
async def health_check():
    return {"status": "healthy", "version": settings.APP_VERSION}


# Root endpoint
@app.get("/")
async def root():
    return {
        "message": settings.APP_NAME,
        "version": settings.APP_VERSION,
        "docs": "/docs" if settings.DEBUG else "Documentation disabled in production",
    }


# Include routers
app.include_router(session_routes.router, prefix="/api/session", tags=["Session"])
app.include_router(transaction_routes.router, prefix="/api/transactions", tags=["Transactions"])
app.include_router(bill_routes.router, prefix="/api/bills", tags=["Bills"])
app.include_router(savings_routes.router, prefix="/api/savings", tags=["Savings"])
app.include_router(report_routes.router, prefix="/api/reports", tags=["Reports"])
app.include_router(audit_log_routes.router, prefix="/api/audit-logs", tags=["Audit Log"])
app.include_router(invite_routes.router, prefix=f"{FUNCTIONS_PREFIX}/invite", tags=["Functions"])
