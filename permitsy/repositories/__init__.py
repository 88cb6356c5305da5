"""Repository pattern implementation."""

from .addon_service_repository import AddonServiceRepository, discounted_price
from .application_repository import ApplicationRepository
from .base import BaseRepository
from .blog_repository import BlogRepository, transform_to_blog
from .contact_repository import ContactRepository
from .country_repository import CountryRepository
from .document_checklist_repository import DocumentChecklistRepository
from .legal_page_repository import LegalPageRepository
from .profile_repository import ProfileRepository
from .testimonial_repository import TestimonialRepository
from .visa_package_repository import VisaPackageRepository

__all__ = [
    "BaseRepository",
    "AddonServiceRepository",
    "discounted_price",
    "ApplicationRepository",
    "BlogRepository",
    "transform_to_blog",
    "ContactRepository",
    "CountryRepository",
    "DocumentChecklistRepository",
    "LegalPageRepository",
    "ProfileRepository",
    "TestimonialRepository",
    "VisaPackageRepository",
]
