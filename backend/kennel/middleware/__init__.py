# Middleware package init
"""
Kennel API - Middleware Package
=================================

Middleware Chain:
    Request → [Request ID] → [Logging] → [GZip] → [CORS] → Route Handler

    1. Request ID: accept or generate a correlation ID for logs and responses
    2. Logging: one access line per request, tagged with the request ID
    3. GZip / CORS: Starlette middleware configured in main.py
"""
