"""API routes."""

from fastapi import APIRouter

from app.api.routes import messaging_webhooks

api_router = APIRouter()

# Public routes (provider webhooks, authenticated by signature)
api_router.include_router(messaging_webhooks.router, prefix="/messaging", tags=["messaging-webhooks"])
