"""
unMute Backend: Pydantic Request/Response Schemas
==================================================

What:  The API contract between the React client and this backend.
How:   FastAPI validates request bodies against these models and serializes
       responses through the `Envelope` wrapper in common.py.

Schemas are kept separate from the SQLAlchemy models so internal columns
(password hashes, raw storage paths) never reach a response by accident.
"""
