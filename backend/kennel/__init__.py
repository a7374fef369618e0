"""
Kennel API - Application Package Initializer
==============================================

Architecture Note:
    The backend follows the same layered shape for every resource:

    ┌─────────────────────────────────────┐
    │           Routes (API Layer)        │  ← HTTP concerns only
    ├─────────────────────────────────────┤
    │   CollectionService (Boundary)      │  ← validation, not-found mapping
    ├─────────────────────────────────────┤
    │      CollectionStore (Storage)      │  ← memory / JSON file / database
    └─────────────────────────────────────┘

    Routes never touch a store directly, and a store never knows about HTTP.
    Swapping the storage backend is a configuration change.
"""

__version__ = "1.0.0"
