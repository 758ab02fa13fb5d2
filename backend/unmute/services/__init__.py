"""
unMute Backend: Services Layer
================================

What:  Business rules between the routes (HTTP) and the models (persistence).
How:   Stateless classes with a module-level singleton; every method takes
       the request's AsyncSession and raises unmute.exceptions types.

Service Inventory:
    - AuthService:      registration, login, uniqueness checks
    - UserService:      profile, password, account deletion, profile picture
    - PostService:      feed, likes, flags, post deletion
    - CommentService:   comments under a post
    - JournalService:   journal entries and mood check-ins
    - ResourceService:  curated help resources
    - AdminService:     moderation queue and user management
    - FileService:      profile picture validation and storage
"""
