"""Unified constants for Permitsy."""

from typing import Dict, Final


# =============================================================================
# TABLES AND REMOTE PROCEDURES
# =============================================================================
class Tables:
    """Backend table names."""

    COUNTRIES: Final[str] = "countries"
    VISA_PACKAGES: Final[str] = "visa_packages"
    VISA_PRICING_TIERS: Final[str] = "visa_pricing_tiers"
    LEGAL_PAGES: Final[str] = "legal_pages"
    TESTIMONIALS: Final[str] = "testimonials"
    APPROVED_VISAS: Final[str] = "approved_visas"
    ADDON_SERVICES: Final[str] = "addon_services"
    DOCUMENT_CHECKLIST: Final[str] = "document_checklist"
    PROFILES: Final[str] = "profiles"
    VISA_APPLICATIONS: Final[str] = "visa_applications"
    APPLICATION_DOCUMENTS: Final[str] = "application_documents"
    APPLICATION_TIMELINE: Final[str] = "application_timeline"


class Rpc:
    """Named remote procedures exposed by the backend."""

    GET_TABLE_INFO: Final[str] = "get_table_info"
    LIST_TABLES: Final[str] = "list_tables"
    EXEC_SQL: Final[str] = "exec_sql"
    EXECUTE_SQL: Final[str] = "execute_sql"
    SAVE_VISA_PACKAGE: Final[str] = "save_visa_package"
    CREATE_LEGAL_PAGES_TABLE: Final[str] = "create_legal_pages_table"
    FIX_DOCUMENT_CHECKLIST: Final[str] = "fix_document_checklist"
    REFRESH_DOCUMENT_CHECKLIST_SCHEMA: Final[str] = "refresh_document_checklist_schema"


# =============================================================================
# BACKEND ERROR CODES
# =============================================================================
class ErrorCodes:
    """Postgres / REST gateway error codes the application reacts to."""

    UNIQUE_VIOLATION: Final[str] = "23505"
    FOREIGN_KEY_VIOLATION: Final[str] = "23503"
    UNDEFINED_TABLE: Final[str] = "42P01"
    UNDEFINED_COLUMN: Final[str] = "42703"
    INVALID_TEXT_REPRESENTATION: Final[str] = "22P02"
    SINGLE_ROW_NOT_FOUND: Final[str] = "PGRST116"
    SCHEMA_CACHE_COLUMN: Final[str] = "PGRST204"
    SCHEMA_CACHE_TABLE: Final[str] = "PGRST205"


# =============================================================================
# DEFAULTS
# =============================================================================
class VisaPackageDefaults:
    """Values used when a visa package is created without explicit data."""

    NAME: Final[str] = "Visa Package"
    GOVERNMENT_FEE: Final[float] = 0.0
    SERVICE_FEE: Final[float] = 0.0
    PROCESSING_DAYS: Final[int] = 15


class CountryDefaults:
    """Fallbacks applied when reshaping country rows."""

    MIN_PRICE: Final[float] = 99.0
    POPULAR_LIMIT: Final[int] = 6


# Placeholder foreign key used by schema checks; never matches a real country.
SENTINEL_UUID: Final[str] = "00000000-0000-0000-0000-000000000000"


class Timeouts:
    """Timeout values in SECONDS."""

    HTTP_REQUEST_SECONDS: Final[int] = 30
    GRACEFUL_SHUTDOWN_SECONDS: Final[int] = 5


class Intervals:
    """Interval values in SECONDS."""

    SCRIPT_STATEMENT_PAUSE: Final[float] = 0.5


class CacheKeys:
    """Query cache keys shared by views and mutations."""

    COUNTRIES: Final[str] = "countries"
    ADMIN_COUNTRIES: Final[str] = "adminCountries"
    COUNTRY: Final[str] = "country"
    COUNTRY_DETAIL: Final[str] = "countryDetail"
    COUNTRY_VISA_PACKAGE: Final[str] = "countryVisaPackage"
    DOCUMENTS: Final[str] = "documents"
    POPULAR_DESTINATIONS: Final[str] = "popularDestinations"
    LEGAL_PAGES: Final[str] = "legalPages"
    TESTIMONIALS: Final[str] = "testimonials"
    APPROVED_VISAS: Final[str] = "approvedVisas"
    ADDON_SERVICES: Final[str] = "addonServices"
    APPLICATION: Final[str] = "application"


class ApplicationStatus:
    """Visa application statuses and their position on the progress bar."""

    PENDING: Final[str] = "pending"
    IN_PROGRESS: Final[str] = "in_progress"
    DOCUMENT_REVIEW: Final[str] = "document_review"
    DOCUMENTS_REQUIRED: Final[str] = "documents_required"
    INTERVIEW_SCHEDULED: Final[str] = "interview_scheduled"
    APPROVED: Final[str] = "approved"
    REJECTED: Final[str] = "rejected"

    STEPS: Final[Dict[str, int]] = {
        PENDING: 0,
        IN_PROGRESS: 1,
        DOCUMENT_REVIEW: 2,
        DOCUMENTS_REQUIRED: 2,
        INTERVIEW_SCHEDULED: 3,
        APPROVED: 4,
        REJECTED: 4,
    }
    LAST_STEP: Final[int] = 4


class UserRoles:
    """Values of profiles.role."""

    USER: Final[str] = "user"
    ADMIN: Final[str] = "admin"
