"""
unMute Backend: API Routes Package
====================================

What:  HTTP route handlers, one module per resource.

Route Inventory:
    - auth.py:          /auth/register, /auth/login (also under /api)
    - posts.py:         /posts feed, likes, flags
    - comments.py:      /posts/{id}/comments
    - journal.py:       /journal
    - moodcheckins.py:  /moodcheckins
    - resources.py:     /resources
    - users.py:         /user profile, password, account, picture
    - admin.py:         /admin moderation and user management
    - files.py:         /files/{path}
    - health.py:        /health

Routes stay thin: they pick the auth dependency, call one service method
and wrap the result in the success envelope. Business rules live in
unmute.services.
"""
