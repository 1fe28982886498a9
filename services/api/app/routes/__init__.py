"""API routes."""

from fastapi import APIRouter

from app.routes import items, users

api_router = APIRouter()

# Ranked items, scoped to a project
api_router.include_router(items.router, prefix="/projects", tags=["items"])

# Users
api_router.include_router(users.router, prefix="/users", tags=["users"])
