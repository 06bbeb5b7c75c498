"""
Main FastAPI application for the Horizon internal job portal.

This module sets up the FastAPI app with CORS, role-based page gating,
and route registration.
"""

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
import os

from horizon_ijp import __version__
from horizon_ijp.api.middleware import RoleAccessMiddleware

app = FastAPI(
    title="Horizon IJP API",
    description="Internal job portal for the Horizon group of companies",
    version=__version__,
    docs_url="/api/docs",
    redoc_url="/api/redoc"
)

# In development we allow common local origins; in production we
# expect explicit origins via HORIZON_ALLOWED_ORIGINS.
environment = os.getenv("HORIZON_ENV", "development").lower()

if environment == "production":
    raw_origins = os.getenv("HORIZON_ALLOWED_ORIGINS", "")
    allowed_origins = [
        origin.strip()
        for origin in raw_origins.split(",")
        if origin.strip()
    ]
else:
    allowed_origins = [
        "http://localhost",
        "http://localhost:8000",
        "http://127.0.0.1:8000",
        "http://localhost:3000",
        "http://127.0.0.1:3000",
    ]

# Added first so it runs inside CORS; preflight requests never reach it.
app.add_middleware(RoleAccessMiddleware)
app.add_middleware(
    CORSMiddleware,
    allow_origins=allowed_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Import routes
from .routes import admin, applications, auth, companies, jobs, pages, users


@app.get("/api/health")
async def health_check():
    """Health check endpoint."""
    return {
        "status": "ok",
        "version": __version__
    }


@app.get("/api")
async def api_info():
    """API information endpoint."""
    return {
        "name": "Horizon IJP API",
        "version": __version__,
        "docs": "/api/docs",
        "health": "/api/health"
    }


@app.get("/")
async def root():
    """Root endpoint - open to everyone."""
    return {
        "message": "Horizon IJP API",
        "login": "/login",
        "docs": "/api/docs",
        "health": "/api/health"
    }


# Include route modules
app.include_router(auth.router)
app.include_router(jobs.router)
app.include_router(applications.router)
app.include_router(users.router)
app.include_router(companies.router)
app.include_router(admin.router)
app.include_router(pages.router)
