# backend/aeroroster/routes/__init__.py
"""
Routes package for the AeroRoster API.

Versioned routers live under ``routes.v1`` and are mounted in main.py.
"""
