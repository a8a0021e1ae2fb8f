"""
Real-time push channel for object events.
"""

from .notifier import (
    OBJECT_CREATED,
    OBJECT_DELETED,
    RealtimeNotifier,
)

__all__ = ["OBJECT_CREATED", "OBJECT_DELETED", "RealtimeNotifier"]
