"""
Main API router for v1.
"""

from fastapi import APIRouter
from ai_feed.api import feeds

router = APIRouter()

router.include_router(feeds.router)
