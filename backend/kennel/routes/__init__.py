# Routes package init
"""
Kennel API - API Routes Package
=================================

Route Inventory:
    - collections.py: CRUD at each resource prefix (/api/dogs, /hubs)
    - health.py:      GET /health
    - root.py:        GET / and GET /hello

Design Principle:
    Routes are THIN. They extract the id and body, call the resource's
    CollectionService, and return its result. Status codes for failures come
    from the global exception handlers in main.py.
"""
