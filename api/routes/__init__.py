"""
API Routes Package

This module consolidates all HTTP routes of the relay.
"""

from fastapi import APIRouter

from . import links
from . import payments
from . import webhooks

# Create main router
router = APIRouter()

# Paths are served unprefixed; PayPal and existing clients call them as-is
router.include_router(links.router)
router.include_router(webhooks.router)
router.include_router(payments.router)

__all__ = ["router"]
