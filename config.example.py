# config.example.py

"""
Documentation-only module (safe to commit).

The real configuration is loaded from environment variables (optionally via a local .env file).
This file exists to make the repo self-documenting without opening a .env file.
"""

ENV_VARS = {
    # App / logging
    "ZENFLOW_APP_NAME": "App name, also used in backup file names (default: zenflow).",
    "ZENFLOW_LOG_LEVEL": "Console logging level (default: INFO). The log file always gets DEBUG.",
    # Connectors
    "ZENFLOW_CONSOLE_ENABLED": "Run the interactive console (true/false, default: true).",
    # Paths (gitignored)
    "ZENFLOW_DATA_DIR": "Local data directory (default: .local/zenflow).",
    "ZENFLOW_DB_PATH": "SQLite database path (default: <data_dir>/zenflow.sqlite3).",
    "ZENFLOW_BACKUP_DIR": "Default /export directory (default: <data_dir>/backups).",
    "ZENFLOW_LOG_DIR": "Directory for <app_name>.log (default: <data_dir>).",
    # Task list
    "ZENFLOW_SORT_KEY": "Initial sort key: PRIORITY | DUE_DATE | CREATED (default: PRIORITY).",
    "ZENFLOW_SORT_DIRECTION": "Initial sort direction: ASC | DESC (default: DESC).",
    "ZENFLOW_LIST_LIMIT": "Max rows printed by /list (default: 50).",
    # Startup
    "ZENFLOW_SEED_ON_START": "Insert default projects/tags when none exist (default: true).",
}
