"""
FastAPI RESTful API for the Bookshelf reading tracker.

This package provides:
- An in-memory book store with add, list, get, update and delete
- Filtering of the book list by name, reading state or finished state
- A consistent {status, message, data} JSON envelope for every response
"""
