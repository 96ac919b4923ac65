"""
V1 API router aggregator — wires all endpoint modules together.
"""

from fastapi import APIRouter

from app.api.v1.endpoints import auth, health, users

api_router = APIRouter()

# Registration, login, logout, current user
api_router.include_router(auth.router)

# User management and role assignment
api_router.include_router(users.router)

# Health
api_router.include_router(health.router)
