"""Pricebook API — main application entry point."""

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from pricebook.core.config import settings
from pricebook.api.routes import health, imports, mapping

app = FastAPI(
    title=settings.APP_NAME,
    version=settings.APP_VERSION,
    description=(
        "Supplier price-list reconciliation. "
        "Preview a sheet, confirm it, compare prices across suppliers."
    ),
)

# CORS
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Routes
app.include_router(health.router, tags=["health"])
app.include_router(imports.router, prefix="/api/v1/imports", tags=["imports"])
app.include_router(mapping.router, prefix="/api/v1/mapping", tags=["mapping"])
