"""
Plant Kernel

Shared infrastructure for the plant operations application:
- Structured JSON logging with request-scoped context
- Typed, coded exception hierarchy
- SQLAlchemy declarative base, engine and session scope
- Injectable clock
- File storage buckets for evidence and template uploads
"""

__version__ = "0.1.0"
