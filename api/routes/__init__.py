"""
API Routes Package

This package contains route handlers organized by feature:
- authentication.py: register, login, face verification and identity echo
"""

from api.routes.authentication import router as authentication_router

__all__ = [
    "authentication_router",
]
