"""
Chat module for server-side messaging functionality.

Handles:
- Message ledger (append, edit, delete, snapshot)
- Presence counting
- Realtime action handling and broadcasting
- Message logging
"""
