# config.example.py

"""
Documentation-only module (safe to commit).

The real configuration is loaded from environment variables (optionally via a local .env file).
This file exists to make the repo self-documenting even without opening .env.example.
"""

ENV_VARS = {
    # App / logging
    "TASKTREE_APP_NAME": "App display name (default: tasktree).",
    "TASKTREE_LOG_LEVEL": "Console logging level (default: INFO). The log file always gets DEBUG.",
    # Connectors
    "TASKTREE_CONSOLE_ENABLED": "Run the interactive console (true/false, default: true).",
    "TASKTREE_CONSOLE_USER_ID": "User id the console acts as (default: console).",
    # Paths (gitignored)
    "TASKTREE_DATA_DIR": "Local data directory, also holds tasktree.log (default: .local/tasktree).",
    "TASKTREE_USERS_DIR": "Per-user tasks.json/config.json root (default: <data_dir>/users).",
    # Storage tuning
    "TASKTREE_BACKUP_KEEP": "tasks.json backups kept per user (default: 10).",
    "TASKTREE_CONFIG_BACKUP_KEEP": "config.json backups kept per user (default: 5).",
    # Sessions
    "TASKTREE_SESSION_TTL_SECONDS": "How long a pending /add or /search prompt waits for input (default: 300).",
}
