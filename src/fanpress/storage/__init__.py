# /src/fanpress/storage/__init__.py
# Log persistence

from .log_store import LogStore

__all__ = [
    "LogStore",
]
