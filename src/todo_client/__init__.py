"""
Todo service client.

Components:
- storage/credential_store.py: SQLite persistence for token + user
- auth/session.py: session state machine (login, register, logout, restore)
- profile/service.py: current user fetch (read-through cache) and profile edits
- tasks/task_sync.py: task CRUD with a full list refresh after every mutation
- api/client.py: JSON-over-HTTP transport (httpx)
- cli/: console front-end
"""

__version__ = "0.1.0"
