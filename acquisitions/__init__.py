"""
acquisitions package

Backend for the acquisitions service:

- FastAPI application factory (`main.py`)
- SQLAlchemy models and database integration (`models.py`, `db.py`)
- Password hashing and session tokens (`auth.py`)
- Register / login / logout orchestration (`auth_flow.py`)
- User record persistence (`store.py`)
- Request validation and pydantic schemas (`validation.py`, `schemas.py`)
"""

__version__ = "1.0.0"
