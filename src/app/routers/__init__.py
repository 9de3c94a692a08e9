# Created by Matthew Valancy
# Copyright 2026 Valpatel Software LLC
# Licensed under AGPL-3.0 — see LICENSE for details.
"""API routers for Alchemy Blaster."""

from app.routers.blaster import router as blaster_router

__all__ = ["blaster_router"]
