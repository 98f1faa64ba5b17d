"""Reminders module: backing stores, permission negotiation and the CRUD facade."""

from .store import BackingStore
from .memory import InMemoryStore
from .gateway import EventKitStore
from .permissions import PermissionNegotiator
from .facade import RemindersFacade

__all__ = [
    'BackingStore',
    'InMemoryStore',
    'EventKitStore',
    'PermissionNegotiator',
    'RemindersFacade',
]
