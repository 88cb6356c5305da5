"""Visa package operations used by the admin pricing screens."""

import math
from typing import Any, Dict, Optional, Union

from loguru import logger

from permitsy.constants import VisaPackageDefaults
from permitsy.core.exceptions import BackendError, SchemaMismatchError
from permitsy.core.result import OperationResult
from permitsy.models.backend import BackendClient
from permitsy.models.entities import VisaPackageRecord, VisaPackageView
from permitsy.repositories.visa_package_repository import VisaPackageRepository
from permitsy.services.schema_fix_service import SchemaFixService, is_schema_shape_error

PackagePayload = Union[VisaPackageView, VisaPackageRecord, Dict[str, Any]]


def _to_number(value: Any, default: float = 0.0) -> float:
    try:
        number = float(value)
    except (TypeError, ValueError):
        return default
    return number if math.isfinite(number) else default


def build_package_row(payload: Dict[str, Any]) -> Dict[str, Any]:
    """
    Persisted visa_packages row for a save request.

    Applies the defaults (name, processing days, processing time), coerces
    the fees to numbers and recomputes total_price. ``is_active`` is never
    part of the row.

    Args:
        payload: Save request fields

    Returns:
        Row dict ready for insert/update
    """
    government_fee = _to_number(payload.get("government_fee"))
    service_fee = _to_number(payload.get("service_fee"))
    processing_days = int(_to_number(payload.get("processing_days"))) or (
        VisaPackageDefaults.PROCESSING_DAYS
    )

    row: Dict[str, Any] = {
        "country_id": payload["country_id"],
        "name": payload.get("name") or VisaPackageDefaults.NAME,
        "government_fee": government_fee,
        "service_fee": service_fee,
        "processing_days": processing_days,
        "processing_time": payload.get("processing_time") or f"{processing_days} days",
        "total_price": government_fee + service_fee,
    }
    if payload.get("id"):
        row["id"] = payload["id"]
    return row


class VisaPackageService:
    """Reads and writes the single visa package of each country."""

    def __init__(
        self,
        backend: BackendClient,
        auto_repair: bool = False,
        schema_fixer: Optional[SchemaFixService] = None,
    ):
        """
        Initialize visa package service.

        Args:
            backend: Connected backend client
            auto_repair: Run the schema repair cascade and retry once when a
                save hits a schema-shape error
            schema_fixer: Repair service (built from backend when omitted)
        """
        self.backend = backend
        self.packages = VisaPackageRepository(backend)
        self.auto_repair = auto_repair
        self.schema_fixer = schema_fixer if schema_fixer is not None else SchemaFixService(backend)

    async def get_country_visa_package(self, country_id: Optional[str]) -> Optional[VisaPackageView]:
        """
        Newest visa package of a country.

        Args:
            country_id: Country ID

        Returns:
            VisaPackageView (active, total recomputed when absent) or None
        """
        if not country_id:
            logger.debug("No country_id provided to get_country_visa_package")
            return None

        try:
            record = await self.packages.latest_for_country(country_id)
        except (BackendError, ValueError) as e:
            logger.error(f"Error fetching country visa package: {e}")
            return None

        if record is None:
            logger.debug(f"No visa package found for country {country_id}")
            return None
        return record.with_total().to_view(is_active=True)

    async def save_visa_package(self, payload: PackagePayload) -> OperationResult[VisaPackageView]:
        """
        Create or update the visa package of a country.

        Updates by id when the payload has one, otherwise updates the
        country's existing package, otherwise inserts.

        Args:
            payload: Package fields; country_id is required

        Returns:
            OperationResult whose data is the stored package as a view
        """
        data = payload.model_dump() if hasattr(payload, "model_dump") else dict(payload)
        if not data.get("country_id"):
            return OperationResult.fail("Country ID is required")

        is_active = data.get("is_active")
        is_active = True if is_active is None else bool(is_active)
        row = build_package_row(data)

        try:
            record = await self._write(row)
        except BackendError as e:
            if not is_schema_shape_error(e):
                logger.error(f"Error saving visa package: {e}")
                return OperationResult.fail(f"Database error: {e.message}")
            return await self._handle_schema_error(e, row, is_active)
        except ValueError as e:
            logger.error(f"Unexpected visa package row from backend: {e}")
            return OperationResult.fail(f"Exception: {e}")

        logger.info(f"Visa package saved for country {row['country_id']}")
        return OperationResult.ok(
            "Visa package saved successfully", record.with_total().to_view(is_active)
        )

    async def _write(self, row: Dict[str, Any]) -> VisaPackageRecord:
        package_id = row.get("id")
        if package_id:
            return await self.packages.update_by_id(package_id, row)

        existing = await self.packages.list_by_country(row["country_id"], columns="id")
        if existing:
            return await self.packages.update_by_country(row["country_id"], row)
        return await self.packages.insert(row)

    async def _handle_schema_error(
        self, error: BackendError, row: Dict[str, Any], is_active: bool
    ) -> OperationResult[VisaPackageView]:
        if not self.auto_repair:
            mismatch = SchemaMismatchError("visa_packages", reason=error.message)
            logger.error(f"Deployment error while saving visa package: {mismatch.message}")
            return OperationResult.fail(mismatch.message)

        logger.warning(f"Schema error while saving visa package, attempting repair: {error}")
        repair = await self.schema_fixer.fix_visa_packages_schema()
        if not repair.success:
            return OperationResult.fail(f"Schema repair failed: {repair.message}")

        try:
            record = await self._write(row)
        except (BackendError, ValueError) as e:
            logger.error(f"Save failed after schema repair: {e}")
            return OperationResult.fail(f"Database error: {e}")

        return OperationResult.ok(
            "Visa package saved successfully after schema repair",
            record.with_total().to_view(is_active),
        )

    async def create_default_package(self, country_id: str) -> Optional[VisaPackageRecord]:
        """
        Insert a default package for a country.

        Args:
            country_id: Country ID

        Returns:
            Stored record, the unsaved default when the insert is rejected,
            or None for an empty country id
        """
        if not country_id:
            return None

        default = VisaPackageRecord(
            country_id=country_id,
            name=VisaPackageDefaults.NAME,
            government_fee=VisaPackageDefaults.GOVERNMENT_FEE,
            service_fee=VisaPackageDefaults.SERVICE_FEE,
            processing_days=VisaPackageDefaults.PROCESSING_DAYS,
            processing_time=f"{VisaPackageDefaults.PROCESSING_DAYS} days",
        )
        try:
            record = await self.packages.insert(default.to_row())
        except (BackendError, ValueError) as e:
            logger.error(f"Error creating default package for {country_id}: {e}")
            return default
        logger.info(f"Default package created for country {country_id}")
        return record

    async def toggle_visa_package_status(
        self, country_id: str, is_active: bool
    ) -> OperationResult[VisaPackageView]:
        """
        Activate or deactivate the package of a country.

        The flag is application state only and is never written. A default
        package is created first when the country has none.

        Args:
            country_id: Country ID
            is_active: Requested status

        Returns:
            OperationResult whose data is the package view with the flag set
        """
        if not country_id:
            return OperationResult.fail("Country ID is required")

        try:
            existing = await self.packages.list_by_country(country_id)
        except BackendError as e:
            logger.error(f"Error checking for existing packages: {e}")
            return OperationResult.fail(f"Database error: {e.message}")

        try:
            if existing:
                record = VisaPackageRecord.model_validate(existing[0])
            else:
                logger.info(f"No package found for {country_id}, creating default package")
                default = VisaPackageRecord(
                    country_id=country_id,
                    processing_time=f"{VisaPackageDefaults.PROCESSING_DAYS} days",
                )
                record = await self.packages.insert(default.to_row())
        except BackendError as e:
            logger.error(f"Error creating default package: {e}")
            return OperationResult.fail(f"Failed to create package: {e.message}")
        except ValueError as e:
            logger.error(f"Unexpected visa package row from backend: {e}")
            return OperationResult.fail(f"Exception: {e}")

        message = "Package activated successfully" if is_active else "Package deactivated successfully"
        return OperationResult.ok(message, record.with_total().to_view(is_active))
