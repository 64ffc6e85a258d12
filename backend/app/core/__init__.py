# app/core/__init__.py
"""
Core application modules.
Contains essential infrastructure components:
- bootstrap: Background upkeep (expired unconfirmed user purge)
- codes: Unique userCode / eventCode generation
- db: Database configuration and connection management
- errors: Domain error taxonomy and HTTP translation
- security: Password hashing, JWT tokens and session lifetimes
"""
