"""Pydantic models mirroring the backend tables.

Rows coming back from the backend may carry extra columns, miss optional
ones or hold NULL in nullable columns; every model ignores unknown keys and
falls back to the field default for missing or NULL values.
"""

from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from permitsy.constants import ApplicationStatus


class Row(BaseModel):
    """Backend row or JSON column object."""

    model_config = ConfigDict(extra="ignore")

    @model_validator(mode="before")
    @classmethod
    def null_to_default(cls, data: Any) -> Any:
        """Drop NULL values for fields that declare a non-null default."""
        if not isinstance(data, dict):
            return data
        fields = {field.alias or name: field for name, field in cls.model_fields.items()}
        fields.update(cls.model_fields)
        return {
            key: value
            for key, value in data.items()
            if value is not None or not _has_non_null_default(fields.get(key))
        }


def _has_non_null_default(field: Any) -> bool:
    if field is None:
        return False
    return field.default_factory is not None or (
        not field.is_required() and field.default is not None
    )


class Entity(Row):
    """Base class for table rows."""

    model_config = ConfigDict(extra="ignore", populate_by_name=True)

    def to_row(self, exclude_none: bool = True) -> Dict[str, Any]:
        """Persisted columns of this entity."""
        return self.model_dump(exclude_none=exclude_none)


def _list_or_empty(value: Any) -> Any:
    if not isinstance(value, list):
        return []
    return [item for item in value if item is not None]


# =============================================================================
# COUNTRIES
# =============================================================================
class EmbassyDetails(Row):
    """Embassy contact block shown on a country page."""

    address: str = ""
    phone: str = ""
    email: str = ""
    hours: str = ""


class ProcessStep(Row):
    """One step of the visa process for a country."""

    step: int = 0
    title: str = ""
    description: str = ""


class FAQItem(Row):
    """Question and answer pair."""

    question: str = ""
    answer: str = ""


class Country(Entity):
    """Destination country."""

    id: Optional[str] = None
    name: str
    flag: Optional[str] = None
    banner: Optional[str] = None
    description: Optional[str] = None
    entry_type: Optional[str] = None
    validity: Optional[str] = None
    processing_time: Optional[str] = None
    length_of_stay: Optional[str] = None
    visa_includes: List[str] = Field(default_factory=list)
    visa_assistance: List[str] = Field(default_factory=list)
    embassy_details: EmbassyDetails = Field(default_factory=EmbassyDetails)
    processing_steps: List[ProcessStep] = Field(default_factory=list)
    faq: List[FAQItem] = Field(default_factory=list)
    requirements_description: Optional[str] = None
    popularity: int = 0
    min_price: Optional[float] = None

    @field_validator(
        "visa_includes", "visa_assistance", "processing_steps", "faq", mode="before"
    )
    @classmethod
    def coerce_lists(cls, v: Any) -> Any:
        """JSON columns that are not lists become empty lists."""
        return _list_or_empty(v)

    @field_validator("embassy_details", mode="before")
    @classmethod
    def coerce_embassy(cls, v: Any) -> Any:
        """Non-object embassy details become a blank block."""
        return v if isinstance(v, dict) else {}


class PricingTier(Entity):
    """Pricing tier offered for a country."""

    id: Optional[str] = None
    country_id: Optional[str] = None
    name: str = ""
    price: str = ""
    processing_time: str = ""
    features: List[str] = Field(default_factory=list)
    is_recommended: bool = False

    @field_validator("features", mode="before")
    @classmethod
    def coerce_features(cls, v: Any) -> Any:
        return _list_or_empty(v)


class DocumentChecklistItem(Entity):
    """Required document for a country's application."""

    id: Optional[str] = None
    country_id: Optional[str] = None
    document_name: str = ""
    document_description: str = ""
    required: bool = True
    # Client-side editing flags, never persisted
    is_new: bool = Field(default=False, exclude=True)
    modified: bool = Field(default=False, exclude=True)


class CountryDetail(Country):
    """Country with its documents and pricing tiers."""

    documents: List[DocumentChecklistItem] = Field(default_factory=list)
    pricing_tiers: List[PricingTier] = Field(default_factory=list)


# =============================================================================
# VISA PACKAGES
# =============================================================================
class VisaPackageRecord(Entity):
    """Persisted shape of a visa_packages row."""

    id: Optional[str] = None
    country_id: str
    name: str = "Visa Package"
    government_fee: float = 0.0
    service_fee: float = 0.0
    processing_days: int = 15
    processing_time: Optional[str] = None
    total_price: Optional[float] = None
    price: Optional[float] = None
    created_at: Optional[str] = None
    updated_at: Optional[str] = None

    @field_validator("government_fee", "service_fee", mode="before")
    @classmethod
    def coerce_fee(cls, v: Any) -> Any:
        return 0.0 if v == "" else v

    def with_total(self) -> "VisaPackageRecord":
        """Copy with total_price filled in when the backend left it empty."""
        if self.total_price:
            return self
        return self.model_copy(update={"total_price": self.government_fee + self.service_fee})

    def to_view(self, is_active: bool = True) -> "VisaPackageView":
        """Project the record into the application-level view."""
        return VisaPackageView(**self.model_dump(), is_active=is_active)


class VisaPackageView(VisaPackageRecord):
    """Visa package as the application sees it.

    ``is_active`` is application state only; ``to_row`` never emits it.
    """

    is_active: bool = True

    def to_row(self, exclude_none: bool = True) -> Dict[str, Any]:
        row = super().to_row(exclude_none=exclude_none)
        row.pop("is_active", None)
        return row


# =============================================================================
# CONTENT
# =============================================================================
class LegalPage(Entity):
    """Static legal page looked up by slug."""

    id: Optional[str] = None
    title: str
    slug: str
    content: str = ""
    last_updated: Optional[str] = None
    created_at: Optional[str] = None


class Testimonial(Entity):
    """Client testimonial; only approved rows are public."""

    id: Optional[str] = None
    client_name: str
    country: str = ""
    visa_type: str = ""
    rating: int = 5
    comment: str = ""
    avatar_url: Optional[str] = None
    approved: bool = False
    created_at: Optional[str] = None
    updated_at: Optional[str] = None


class ApprovedVisa(Entity):
    """Gallery entry for an approved visa."""

    id: Optional[str] = None
    country: str
    destination: Optional[str] = None
    visa_type: str = ""
    visa_category: Optional[str] = None
    duration: Optional[str] = None
    image_url: str = ""
    approval_date: Optional[str] = None
    client_id: Optional[str] = None
    created_at: Optional[str] = None


class AddonService(Entity):
    """Catalog item sold next to a visa."""

    id: Optional[str] = None
    name: str
    description: str = ""
    long_description: Optional[str] = None
    price: float = 0.0
    discount_percentage: Optional[float] = None
    delivery_days: int = 0
    image_url: str = ""
    requirements: List[str] = Field(default_factory=list)
    process: List[str] = Field(default_factory=list)
    faqs: List[FAQItem] = Field(default_factory=list)
    created_at: Optional[str] = None
    updated_at: Optional[str] = None

    @field_validator("requirements", "process", "faqs", mode="before")
    @classmethod
    def coerce_lists(cls, v: Any) -> Any:
        return _list_or_empty(v)


class Blog(Entity):
    """Blog post."""

    id: str
    title: str = ""
    slug: str = ""
    content: str = ""
    excerpt: str = ""
    featured_image: str = ""
    author_id: str = ""
    published_at: Optional[str] = None
    created_at: Optional[str] = None
    updated_at: Optional[str] = None


# =============================================================================
# APPLICATIONS
# =============================================================================
class ApplicationDocument(Entity):
    """Document attached to a visa application."""

    id: Optional[str] = None
    application_id: Optional[str] = None
    document_type: str = ""
    file_url: Optional[str] = None
    status: str = "pending"
    feedback: Optional[str] = None
    uploaded_at: Optional[str] = None
    created_at: Optional[str] = None
    updated_at: Optional[str] = None


class TimelineEvent(Entity):
    """Entry in an application's history."""

    id: Optional[str] = None
    application_id: Optional[str] = None
    event: str = ""
    date: Optional[str] = None
    description: Optional[str] = None
    created_at: Optional[str] = None


class VisaApplication(Entity):
    """Visa application with its package, country, documents and timeline.

    Embedded relations arrive under their table names and are exposed under
    shorter attribute names.
    """

    id: str
    user_id: Optional[str] = None
    package_id: Optional[str] = None
    country_id: Optional[str] = None
    visa_type_id: Optional[str] = None
    status: str = ApplicationStatus.PENDING
    next_step: Optional[str] = None
    submitted_date: Optional[str] = None
    form_data: Dict[str, Any] = Field(default_factory=dict)
    created_at: Optional[str] = None
    updated_at: Optional[str] = None
    package: Optional[VisaPackageRecord] = Field(default=None, alias="visa_packages")
    country: Optional[Country] = Field(default=None, alias="countries")
    documents: List[ApplicationDocument] = Field(
        default_factory=list, alias="application_documents"
    )
    timeline: List[TimelineEvent] = Field(default_factory=list, alias="application_timeline")

    @field_validator("form_data", mode="before")
    @classmethod
    def coerce_form_data(cls, v: Any) -> Any:
        return v if isinstance(v, dict) else {}

    @field_validator("documents", "timeline", mode="before")
    @classmethod
    def coerce_lists(cls, v: Any) -> Any:
        return _list_or_empty(v)

    @property
    def current_step(self) -> int:
        """Position of the status on the progress bar, 0 for unknown statuses."""
        return ApplicationStatus.STEPS.get(self.status, 0)

    @property
    def progress_percentage(self) -> float:
        return self.current_step / ApplicationStatus.LAST_STEP * 100


class ContactMessage(BaseModel):
    """Message submitted through the contact form."""

    name: str
    email: str
    message: str
    subject: Optional[str] = None
