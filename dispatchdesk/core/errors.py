"""
Dispatch Desk Errors
====================

Exception hierarchy shared by the store, the order desk and the routes.
"""


class DispatchDeskError(Exception):
    """Base class for all Dispatch Desk errors"""


class StoreError(DispatchDeskError):
    """The document store could not complete a request"""


class MutationError(DispatchDeskError):
    """An update or delete against the store failed"""

    def __init__(self, message, cause=None):
        super().__init__(message)
        self.cause = cause


class ValidationError(DispatchDeskError):
    """Local input was rejected before any request was sent"""


class ConfirmationRequired(ValidationError):
    """A destructive action was attempted without explicit confirmation"""
