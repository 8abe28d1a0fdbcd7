# Services package init
"""
SimpleBlog Backend — Services Layer
=====================================

What:  Everything between the HTML routes and the database.

Service Inventory:
    - PostStore: CRUD adapter over the posts table (one session per request)
    - UploadService: featuredImage validation and storage
    - PostService: form → record → upload → store orchestration
    - seed: development fixture posts and their loader
"""
