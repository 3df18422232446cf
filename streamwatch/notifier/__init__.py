"""Stream presence tracking and Discord notification pipeline."""

from .dispatcher import DispatchReport, NotificationDispatcher
from .fetcher import StreamSnapshotFetcher
from .models import Category, StreamRecord
from .presence import PresenceTracker, Reconciliation, reconcile
from .resolver import CategoryResolver
from .scheduler import ChatClient, Scheduler, SchedulerState

__all__ = [
    # Models
    "Category",
    "StreamRecord",
    # Components
    "CategoryResolver",
    "StreamSnapshotFetcher",
    "PresenceTracker",
    "Reconciliation",
    "reconcile",
    "NotificationDispatcher",
    "DispatchReport",
    "Scheduler",
    "SchedulerState",
    "ChatClient",
]
