"""Shared infrastructure: the Watchtower SQLite log sink."""

from common.watchtower import LogEntry, Watchtower, WatchtowerHandler, get_connection

__all__ = [
    "LogEntry",
    "Watchtower", "WatchtowerHandler",
    "get_connection",
]
