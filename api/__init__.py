"""
API Layer for the Face-Verified Authentication Service

This package provides the FastAPI-based HTTP boundary that exposes:
- REST endpoints for registration, login, face verification and identity
- Health check endpoint

It only translates between HTTP and the framework-free core package.
"""
