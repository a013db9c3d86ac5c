"""
Server package for the realtime chat backend.

This package contains all server-side functionality including:
- Session registration and authentication
- Chat message ledger and broadcasting
- Presence tracking
- Client connection management
- Configuration and utilities
"""
