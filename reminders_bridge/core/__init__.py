"""
Core module for reminders-bridge - contains domain models, configuration, and exceptions.
"""

from .models import (
    AuthorizationStatus,
    DueDate,
    OperationClass,
    ReminderItem,
    ReminderList,
    Result,
)

from .config import BridgeConfig

from .exceptions import (
    BridgeError,
    ConfigurationError,
    StoreOperationError,
    ReminderError,
    InvalidListError,
    NotFoundError,
    StoreError,
    EncodingError,
    InvalidDateComponentsError,
    UnknownError,
    PermissionDeniedError,
)

__all__ = [
    # Models
    'AuthorizationStatus',
    'DueDate',
    'OperationClass',
    'ReminderItem',
    'ReminderList',
    'Result',
    'BridgeConfig',
    # Exceptions
    'BridgeError',
    'ConfigurationError',
    'StoreOperationError',
    'ReminderError',
    'InvalidListError',
    'NotFoundError',
    'StoreError',
    'EncodingError',
    'InvalidDateComponentsError',
    'UnknownError',
    'PermissionDeniedError',
]
