# Routes package init
"""
Coffee Catalog Backend: API Routes Package
============================================

Route Inventory:
    - coffees.py: /coffees CRUD + /coffees/{id}/recommend
    - chains.py:  GET /chains/{chain_id}
    - misc.py:    GET /, GET /misc/custom, GET /misc/teapot
    - health.py:  GET /health

Routes are thin: extract input, call a service, return the result. Business
rules live in catalog.services.
"""
