from fastapi import APIRouter
from teamdash.routers import activity, auth, documents, metrics, teams

# Centralized API router hub; main.py only imports this single hub.
api_router = APIRouter()

api_router.include_router(auth.router, tags=["Authentication"])
api_router.include_router(metrics.router, tags=["Performance Metrics"])
api_router.include_router(documents.router, tags=["Documents"])
api_router.include_router(teams.router, tags=["Teams"])
api_router.include_router(activity.router, tags=["Activity"])
