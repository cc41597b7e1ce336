"""
PicPlace Backend — Application Package
========================================

What: REST backend for sharing places: users sign up, add places by address
      (geocoded to coordinates) with an optional picture, and browse each
      other's places.

Architecture:
    ┌─────────────────────────────────────┐
    │           Routes (API Layer)        │  ← HTTP concerns only
    ├─────────────────────────────────────┤
    │  Services (places, users, files,    │  ← Rules, orchestration
    │  credentials, geocoding)            │
    ├─────────────────────────────────────┤
    │  Validation · Repository            │  ← Input rules, atomic writes
    ├─────────────────────────────────────┤
    │  Models (SQLAlchemy) · Schemas      │
    └─────────────────────────────────────┘
"""

__version__ = "1.0.0"
