"""
Auth module for server-side session handling.

Handles:
- User registration
- Token authentication
- Session invalidation on logout
"""
