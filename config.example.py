# config.example.py

"""
Documentation-only module (safe to commit).

The real configuration is loaded from environment variables (optionally via a local .env file).
Both `fmn` and `fmn-daemon` read the same variables.

This file exists to make the repo self-documenting even without opening .env.example.
"""

ENV_VARS = {
    # App / logging
    "FMN_APP_NAME": "App name, also the notification title (default: forget-me-not).",
    "FMN_LOG_LEVEL": "Daemon console logging level (default: INFO).",
    "FMN_DATA_DIR": "Local data directory; holds fmn.log (default: .local/fmn).",
    # Daemon / client
    "FMN_DAEMON_ADDR": "host:port the daemon listens on and the client connects to (default: 127.0.0.1:8082).",
    "FMN_CONNECT_TIMEOUT": "Client socket timeout in seconds (default: 5.0).",
    # Scheduler
    "FMN_COMMAND_CAPACITY": "Scheduler mailbox size; callers block when it is full (default: 8).",
    # Notifications
    "FMN_IMAGE_PATH": "Default notification icon for `fmn add` (optional).",
    "FMN_SOUND_PATH": "Default 16-bit WAV for `fmn add`; needs the 'sound' extra (optional).",
    "FMN_NOTIFY_TIMEOUT": "Seconds a desktop notification stays visible (default: 10).",
}
