"""Root API router for the application."""

from fastapi import APIRouter

from app.api.routes import dependencies, health, labels, tasks

api_router = APIRouter()
api_router.include_router(health.router, prefix="/health", tags=["health"])
api_router.include_router(dependencies.router, tags=["dependencies"])
api_router.include_router(tasks.router, tags=["tasks"])
api_router.include_router(labels.router, tags=["labels"])
