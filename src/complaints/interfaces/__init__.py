"""
Complaint Interfaces Layer
===========================

Interface adapters (controllers) for the complaints module.

Contains:
- Controllers: FastAPI route handlers
- Dependencies: service wiring and principal resolution

This is the outermost layer - handles HTTP requests/responses and
delegates to application services.
"""

from src.complaints.interfaces.controllers import complaints_router, technicians_router

__all__ = ["complaints_router", "technicians_router"]
