"""
Chat module for client-side messaging functionality.

Handles:
- Registration, authentication and logout
- Sending, editing and deleting chat messages
- Typing notifications
- Dispatching server events to handlers
"""
