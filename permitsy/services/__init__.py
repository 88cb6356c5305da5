"""Services built on top of the repositories."""

from .diagnostic_service import DiagnosticService
from .document_checklist_service import DEFAULT_DOCUMENTS, DocumentChecklistService
from .mutations import MutationConfig, TableMutations
from .notification import Notification, NotificationLevel, Notifier
from .query_cache import QueryCache
from .schema_fix_service import (
    EXPECTED_SCHEMA,
    SchemaFixService,
    SchemaValidator,
    is_schema_shape_error,
)
from .visa_package_service import VisaPackageService, build_package_row

__all__ = [
    "DiagnosticService",
    "DocumentChecklistService",
    "DEFAULT_DOCUMENTS",
    "MutationConfig",
    "TableMutations",
    "Notification",
    "NotificationLevel",
    "Notifier",
    "QueryCache",
    "EXPECTED_SCHEMA",
    "SchemaFixService",
    "SchemaValidator",
    "is_schema_shape_error",
    "VisaPackageService",
    "build_package_row",
]
