# File: localizable/api/api.py

from fastapi import APIRouter

from localizable.api.endpoints import localizations

api_router = APIRouter()

api_router.include_router(localizations.router, prefix="/localizations", tags=["Localizations"])
