# config.example.py

"""
Documentation-only module (safe to commit).

The real configuration is loaded from environment variables (optionally via a local .env file).
The bearer token is never configured here; it lives in the credential store under TODO_DATA_DIR.

This file exists to make the repo self-documenting even without opening .env.example.
"""

ENV_VARS = {
    # App / logging
    "TODO_APP_NAME": "App display name (default: todo).",
    "TODO_LOG_LEVEL": "Console logging level (default: INFO). The log file always gets DEBUG.",
    # Remote service
    "TODO_API_BASE_URL": (
        "Backend base URL (default: http://localhost:8000). "
        "Use the LAN address of the backend when it runs on another machine."
    ),
    "TODO_HTTP_TIMEOUT_SECONDS": "Request timeout in seconds (default: 5.0, the httpx default).",
    # Front-end
    "TODO_CONSOLE_ENABLED": "Run the interactive console (true/false, default: true).",
    # Paths (gitignored)
    "TODO_DATA_DIR": "Local data directory (default: .local/todo). Also holds todo.log.",
    "TODO_CREDENTIALS_DB_PATH": (
        "Credential store SQLite path (default: <data_dir>/credentials.sqlite3)."
    ),
}
