from typing import Optional


class MenuError(Exception):
    """Base class for every failure surfaced by the menu services."""


class ValidationError(MenuError):
    def __init__(self, message: str, field: Optional[str] = None):
        super().__init__(message)
        self.field = field


class NotAuthorized(MenuError):
    pass


class NotFound(MenuError):
    pass


class StoreUnavailable(MenuError):
    """Transport or backend failure in the relational store or the asset store."""


class AssetOrphanRisk(MenuError):
    """
    An asset upload or delete failed while the record mutation went ahead.
    Never raised out of the image lifecycle functions, only collected as a warning.
    """
    def __init__(self, message: str, path: Optional[str] = None):
        super().__init__(message)
        self.path = path


class WorkflowStateError(MenuError):
    pass
