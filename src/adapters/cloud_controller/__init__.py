from adapters.cloud_controller.client import CloudControllerClient
from adapters.cloud_controller.models import (
    AppListDocument,
    ProcessStatsDocument,
    RootDocument,
    TokenDocument,
)

__all__ = [
    "AppListDocument",
    "CloudControllerClient",
    "ProcessStatsDocument",
    "RootDocument",
    "TokenDocument",
]
