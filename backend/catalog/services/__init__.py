# Services package init
"""
Coffee Catalog Backend: Services Layer
========================================

Service Inventory:
    - CoffeeService: coffees CRUD, flavour reconciliation, recommend
    - ChainService:  chain id validation and name lookup

Services take plain data and return domain objects; they raise
catalog.exceptions errors and never build HTTP responses.
"""
