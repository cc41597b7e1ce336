# Middleware package init
"""
PicPlace Backend — Middleware Package
=======================================

Middleware Chain:
    Request → [Request context] → [GZip] → [CORS] → Route Handler

    The request context middleware runs first so the access log line and any
    error body carry the same correlation ID.
"""
