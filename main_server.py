#!/usr/bin/env python3
"""
Realtime Chat Server - Main Entry Point

Unified entry point for the server application that serves:
- Registration, authentication and logout
- Chat messaging with edit and delete
- Typing notifications
- Live presence counts

Usage:
    python main_server.py

Optional arguments:
    --host HOST                 Bind address (default: 0.0.0.0 or $CHAT_HOST)
    --port PORT                 WebSocket port (default: 3009 or $CHAT_PORT)
    --logs-dir DIR              Chat transcript directory (default: logs)
    --require-auth-for-edits    Only let authors edit or delete their messages
    --debug                     Enable debug logging
"""

if __name__ == "__main__":
    from server.main_server import main

    main()
