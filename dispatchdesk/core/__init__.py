"""
Dispatch Desk Core
==================

Core utilities and shared functionality for Dispatch Desk modules.
"""

from .config import Config, get_config_value
from .database import Database, DocumentStore, SQLiteDocumentStore
from .errors import (
    DispatchDeskError, StoreError, MutationError, ValidationError, ConfirmationRequired
)
from .logging_service import LoggingService, db_log

__all__ = [
    'Config', 'get_config_value',
    'Database', 'DocumentStore', 'SQLiteDocumentStore',
    'DispatchDeskError', 'StoreError', 'MutationError', 'ValidationError', 'ConfirmationRequired',
    'LoggingService', 'db_log',
]
