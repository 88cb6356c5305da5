"""Admin diagnostics for countries and their visa packages."""

from typing import Any, Dict, List

from loguru import logger

from permitsy.constants import SENTINEL_UUID, ErrorCodes, Rpc, Tables, VisaPackageDefaults
from permitsy.core.exceptions import BackendError
from permitsy.core.result import DiagnosticResult, OperationResult
from permitsy.models.backend import BackendClient
from permitsy.models.entities import VisaPackageRecord


def package_issues(row: Dict[str, Any]) -> List[str]:
    """
    Problems with a stored visa package row.

    Args:
        row: Raw visa_packages row

    Returns:
        Human readable issue list, empty when the package is complete
    """
    issues = []
    if not row.get("name"):
        issues.append("Missing package name")
    if row.get("government_fee") is None:
        issues.append("Missing government fee")
    if row.get("service_fee") is None:
        issues.append("Missing service fee")
    if not row.get("processing_days"):
        issues.append("Missing processing days")
    return issues


class DiagnosticService:
    """Connection, table and per-country package checks for the admin panel."""

    def __init__(self, backend: BackendClient):
        self.backend = backend

    async def check_database_connection(self) -> OperationResult[None]:
        """Check the countries table."""
        try:
            await self.backend.table(Tables.COUNTRIES).select("id").limit(1).execute()
        except BackendError as e:
            logger.error(f"Database connection error: {e}")
            return OperationResult.fail(f"Database connection error: {e.message}")
        return OperationResult.ok("Database connection successful")

    async def check_visa_packages_table(self) -> OperationResult[None]:
        """Report whether the visa_packages table exists."""
        try:
            await self.backend.table(Tables.VISA_PACKAGES).select("id").limit(1).execute()
        except BackendError as e:
            if e.is_missing_table:
                logger.warning("visa_packages table does not exist")
                return OperationResult.fail("Schema needs to be created")
            logger.error(f"Error checking visa_packages schema: {e}")
            return OperationResult.fail(f"Schema check failed: {e.message}")
        return OperationResult.ok("Schema exists")

    async def run_diagnostic(self, country_id: str) -> DiagnosticResult:
        """
        Check the visa package of a country, creating a default one if missing.

        Args:
            country_id: Country ID

        Returns:
            DiagnosticResult; data holds the package view or the issues found
        """
        logger.info(f"Running diagnostic for country {country_id}")
        try:
            country = await (
                self.backend.table(Tables.COUNTRIES)
                .select("id,name")
                .eq("id", country_id)
                .single()
                .execute()
            )
        except BackendError as e:
            return DiagnosticResult(
                success=False,
                message=f"Country not found: {e.message}",
                data={"error": e.to_dict()},
            )

        try:
            packages = await (
                self.backend.table(Tables.VISA_PACKAGES)
                .select("*")
                .eq("country_id", country_id)
                .execute()
            )
        except BackendError as e:
            return DiagnosticResult(
                success=False,
                message=f"Error checking visa packages: {e.message}",
                data={"error": e.to_dict()},
            )

        if not packages:
            return await self._create_named_default(country_id, country.get("name") or "")

        existing = packages[0]
        issues = package_issues(existing)
        if issues:
            return DiagnosticResult(
                success=False,
                message=f"Found issues with visa package: {', '.join(issues)}",
                data={"issues": issues, "package": existing},
            )

        view = VisaPackageRecord.model_validate(existing).with_total().to_view(is_active=True)
        return DiagnosticResult(
            success=True,
            message="Visa package is properly configured",
            data={"package": view},
        )

    async def _create_named_default(self, country_id: str, country_name: str) -> DiagnosticResult:
        logger.info(f"No package found for {country_id}, creating default package")
        default = VisaPackageRecord(
            country_id=country_id,
            name=f"{country_name} Visa".strip(),
            government_fee=VisaPackageDefaults.GOVERNMENT_FEE,
            service_fee=VisaPackageDefaults.SERVICE_FEE,
            processing_days=VisaPackageDefaults.PROCESSING_DAYS,
            processing_time=f"{VisaPackageDefaults.PROCESSING_DAYS} days",
            price=0,
        )
        try:
            row = await (
                self.backend.table(Tables.VISA_PACKAGES).insert(default.to_row()).single().execute()
            )
            created = VisaPackageRecord.model_validate(row)
        except (BackendError, ValueError) as e:
            message = e.message if isinstance(e, BackendError) else str(e)
            return DiagnosticResult(
                success=False,
                message=f"Failed to create default package: {message}",
                data={"error": e.to_dict() if isinstance(e, BackendError) else {"message": message}},
            )

        return DiagnosticResult(
            success=True,
            message="Created default visa package",
            data={"package": created.with_total().to_view(is_active=True)},
        )

    async def collect_database_structure(self) -> Dict[str, Any]:
        """
        Snapshot of the visa_packages/countries tables and the helper procedures.

        Returns:
            Dict with per-table existence and columns, the relationship check
            and procedure availability
        """
        structure: Dict[str, Any] = {
            Tables.VISA_PACKAGES: await self._describe_table(Tables.VISA_PACKAGES),
            Tables.COUNTRIES: await self._describe_table(Tables.COUNTRIES),
        }

        if structure[Tables.VISA_PACKAGES]["exists"] and structure[Tables.COUNTRIES]["exists"]:
            try:
                await (
                    self.backend.table(Tables.VISA_PACKAGES)
                    .select(f"*,{Tables.COUNTRIES}(*)")
                    .limit(1)
                    .execute()
                )
                structure["relationships"] = {"visa_packages_to_countries": True}
            except BackendError as e:
                structure["relationships"] = {
                    "visa_packages_to_countries": False,
                    "error": e.message,
                }

        structure["rpc_functions"] = await self._check_rpc_functions()
        return structure

    async def _describe_table(self, table: str) -> Dict[str, Any]:
        result: Dict[str, Any] = {"exists": False, "columns": []}
        try:
            rows = await self.backend.table(table).select("*").limit(1).execute()
        except BackendError as e:
            logger.error(f"Error checking {table}: {e}")
            result["error"] = e.message
            return result

        result["exists"] = True
        if rows:
            result["columns"] = list(rows[0].keys())
            result["sample_data"] = rows[0]
            return result

        # Empty table, ask the backend for the column list
        try:
            columns = await self.backend.rpc(Rpc.GET_TABLE_INFO, {"p_table_name": table})
            result["columns"] = [
                col["column_name"] for col in columns or [] if isinstance(col, dict)
            ]
        except BackendError as e:
            logger.debug(f"get_table_info unavailable for {table}: {e.message}")
        return result

    async def _check_rpc_functions(self) -> Dict[str, Any]:
        status: Dict[str, Any] = {
            Rpc.GET_TABLE_INFO: {"exists": False},
            Rpc.SAVE_VISA_PACKAGE: {"exists": False},
        }

        try:
            info = await self.backend.rpc(Rpc.GET_TABLE_INFO, {"p_table_name": Tables.VISA_PACKAGES})
            status[Rpc.GET_TABLE_INFO] = {"exists": True, "sample_output": info}
        except BackendError as e:
            status[Rpc.GET_TABLE_INFO]["error"] = e.message

        params = {
            "p_country_id": SENTINEL_UUID,
            "p_name": "Test Package",
            "p_government_fee": 0,
            "p_service_fee": 0,
            "p_processing_days": 0,
        }
        try:
            output = await self.backend.rpc(Rpc.SAVE_VISA_PACKAGE, params)
            status[Rpc.SAVE_VISA_PACKAGE] = {"exists": True, "sample_output": output}
        except BackendError as e:
            if e.code in (ErrorCodes.INVALID_TEXT_REPRESENTATION, ErrorCodes.FOREIGN_KEY_VIOLATION):
                status[Rpc.SAVE_VISA_PACKAGE] = {
                    "exists": True,
                    "error": "Expected argument error (function exists)",
                }
            else:
                status[Rpc.SAVE_VISA_PACKAGE]["error"] = e.message
        return status
