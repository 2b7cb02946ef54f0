from fastapi import APIRouter

from tracker_suite.api.routes import (
    auth,
    clients,
    follow_ups,
    interactions,
    email,
    analytics,
    export,
    journey,
    admin,
)

api_router = APIRouter()

api_router.include_router(auth.router, prefix="/auth", tags=["auth"])
api_router.include_router(clients.router, prefix="/clients", tags=["clients"])
api_router.include_router(follow_ups.router, prefix="/follow-ups", tags=["follow-ups"])
api_router.include_router(interactions.router, prefix="/interactions", tags=["interactions"])
api_router.include_router(email.router, prefix="/email", tags=["email"])
api_router.include_router(analytics.dashboard_router, prefix="/dashboard", tags=["dashboard"])
api_router.include_router(analytics.analytics_router, prefix="/analytics", tags=["analytics"])
api_router.include_router(export.router, prefix="/export", tags=["export"])
api_router.include_router(journey.router, prefix="/journey", tags=["journey"])
api_router.include_router(admin.router, prefix="/admin", tags=["admin"])
