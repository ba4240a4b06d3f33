"""
V1 API router aggregator — wires all endpoint modules together.
"""

from fastapi import APIRouter

from app.api.v1.endpoints import admins, auth, health, settings, whitelist

api_router = APIRouter()

# Auth (session, logout, profile)
api_router.include_router(auth.router)

# Whitelist CRUD, import / export, bulk delete, deduplication
api_router.include_router(whitelist.router)

# Admin accounts (super admin only)
api_router.include_router(admins.router)

# Registration config
api_router.include_router(settings.router)

# Health
api_router.include_router(health.router)
