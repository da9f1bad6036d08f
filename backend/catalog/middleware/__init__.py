# Middleware package init
"""
Coffee Catalog Backend: Middleware Package
============================================

Middleware Chain (request direction):
    Request → [Request ID] → [Logging] → [Timeout] → [GZip] → [CORS] → Route

    - Request ID first so every later log line can carry the id.
    - Logging wraps Timeout so 408 responses are logged with their duration.
"""
