import logging

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from shared.core.config import settings
from shared.core.database import leasing_engine, Base
from shared.exception_handler import setup_exception_handlers

from . import models  # noqa: F401  registers tables on Base
from .router.leasing_tenants import lease_units_router
from .router.space_sites import unit_floors_router
from .router.rate_governance import (
    rate_approvals_router,
    rate_change_requests_router,
    rate_increases_router,
    rate_overrides_router,
)

logging.basicConfig(
    level=settings.LOG_LEVEL,
    format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
)

app = FastAPI(title="Leasing Service API")

# Create all tables
Base.metadata.create_all(bind=leasing_engine)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

setup_exception_handlers(app)

# Include routers
app.include_router(lease_units_router.router)
app.include_router(unit_floors_router.router)
app.include_router(rate_overrides_router.router)
app.include_router(rate_change_requests_router.router)
app.include_router(rate_approvals_router.router)
app.include_router(rate_increases_router.router)


@app.get("/")
def root():
    return {"message": "Leasing Service API is running"}
