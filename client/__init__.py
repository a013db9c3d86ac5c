"""
Client package for the realtime chat backend.

This package contains the client-side chat functionality.
"""
