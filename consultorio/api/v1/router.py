"""API v1 router configuration."""

from fastapi import APIRouter

from consultorio.api.v1.endpoints import appointments, health, notifications, sessions

api_router = APIRouter()

api_router.include_router(health.router, tags=["Health"])
api_router.include_router(appointments.router, prefix="/appointments", tags=["Appointments"])
api_router.include_router(sessions.router, prefix="/session", tags=["Consultation"])
api_router.include_router(notifications.router, prefix="/notifications", tags=["Notifications"])
