"""
FastAPI RESTful API for the Bookstore Inventory.

This package provides:
- Book create/list/update/delete endpoints backed by MongoDB
- A repository abstraction over book storage
- Local file uploads
"""
