# newsdesk/core/__init__.py
"""
Core application modules.
Contains essential infrastructure components:
- bootstrap: Default admin creation on first startup
- db: Tortoise ORM configuration and connection management
- errors: Application error taxonomy and its FastAPI exception handler
- security: Password hashing, secret comparison and session tokens
"""
