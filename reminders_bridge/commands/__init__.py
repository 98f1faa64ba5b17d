"""
Command implementations for reminders-bridge.
"""

from .status import StatusCommand
from .lists import ListsCommand
from .reminders import RemindersCommand
from .serve import ServeCommand

__all__ = [
    'StatusCommand',
    'ListsCommand',
    'RemindersCommand',
    'ServeCommand',
]
