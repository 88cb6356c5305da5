"""Backend client, query builder and table entities."""

from .backend import BackendClient
from .entities import (
    AddonService,
    ApplicationDocument,
    ApprovedVisa,
    Blog,
    ContactMessage,
    Country,
    CountryDetail,
    DocumentChecklistItem,
    EmbassyDetails,
    FAQItem,
    LegalPage,
    PricingTier,
    ProcessStep,
    Testimonial,
    TimelineEvent,
    VisaApplication,
    VisaPackageRecord,
    VisaPackageView,
)
from .query import Filter, Query, QueryBuilder

__all__ = [
    "BackendClient",
    "Query",
    "QueryBuilder",
    "Filter",
    "AddonService",
    "ApplicationDocument",
    "ApprovedVisa",
    "Blog",
    "ContactMessage",
    "Country",
    "CountryDetail",
    "DocumentChecklistItem",
    "EmbassyDetails",
    "FAQItem",
    "LegalPage",
    "PricingTier",
    "ProcessStep",
    "Testimonial",
    "TimelineEvent",
    "VisaApplication",
    "VisaPackageRecord",
    "VisaPackageView",
]
