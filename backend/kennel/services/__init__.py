# Services package init
"""
Kennel API - Services Layer
=============================

What:  Business logic between routes (HTTP) and stores (persistence).

Service Inventory:
    - validation: required-field and body-shape checks
    - CollectionService: the per-resource request boundary
    - CollectionRegistry: builds and owns the services of one app instance
"""
