"""Hardcoded default configuration values."""

from __future__ import annotations

from typing import Any

from kwikresolver.infrastructure.http.headers import DEFAULT_USER_AGENT

DEFAULT_CONFIG: dict[str, Any] = {
    "app_name": "kwikresolver",
    "environment": "dev",
    "http": {
        "timeout_seconds": 30.0,
        "user_agent": DEFAULT_USER_AGENT,
    },
    "resolver": {
        "max_attempts": 3,
        "retry_delay_seconds": 1.0,
    },
    "logging": {
        "level": "INFO",
        "format": None,  # Derived from environment in schema.py
    },
}
