from fastapi import APIRouter
from campus_events.api.v1.endpoints import auth, tickets, events, users, analytics, admin

# Create main API router
api_router = APIRouter()

api_router.include_router(
    auth.router,
    prefix="/auth",
    tags=["authentication"]
)

api_router.include_router(
    tickets.router,
    prefix="/tickets",
    tags=["tickets"]
)

api_router.include_router(
    events.router,
    prefix="/events",
    tags=["events"]
)

api_router.include_router(
    users.router,
    prefix="/users",
    tags=["users"]
)

api_router.include_router(
    analytics.router,
    prefix="/analytics",
    tags=["analytics"]
)

api_router.include_router(
    admin.router,
    prefix="/admin",
    tags=["admin"]
)
