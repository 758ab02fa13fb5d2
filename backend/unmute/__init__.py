"""
unMute Backend
===============

REST API for unMute, a mental-health community app: public posts with
likes and comments, private journals with mood check-ins, curated help
resources and an admin moderation queue.

Package layout:
    config.py      environment-driven settings
    database.py    async engine, session dependency, declarative Base
    security.py    password hashing, bearer tokens, Principal dependencies
    exceptions.py  error hierarchy rendered by the handlers in main.py
    models/        SQLAlchemy ORM models
    schemas/       Pydantic request/response models
    services/      business rules, one service per resource
    routes/        thin FastAPI routers
    middleware/    rate limit, request id, access log
"""

__version__ = "1.0.0"
