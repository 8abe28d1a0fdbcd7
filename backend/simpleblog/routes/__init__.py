# Routes package init
"""
SimpleBlog Backend — Routes Package
=====================================

Route Inventory:
    - posts.py:   the blog's HTML pages and form targets
    - health.py:  GET /health   (store connectivity probe)
    - seeds.py:   GET /seeds    (development only; mounted when
                                 SEED_ROUTE_ENABLED is true)
"""
