"""
unMute Backend: Middleware Package
====================================

What:  Cross-cutting concerns applied to every request.

Middleware Chain:
    Request → [Rate Limit] → [Request ID] → [Access Log] → [CORS] → Route

    - Rate limit runs first so abusive clients are rejected before any work
    - Request ID sets the correlation id used by the access log and by the
      error envelope
    - The access log sees the final status code and duration
"""
