"""Tests for the schema repair cascade and the schema validator."""

import pytest

from permitsy.constants import SENTINEL_UUID, Rpc, Tables
from permitsy.core.exceptions import BackendError, SchemaMismatchError
from permitsy.services import EXPECTED_SCHEMA, SchemaFixService, SchemaValidator, is_schema_shape_error


def stale_schema_cache(backend):
    """Make the column check fail while the table itself accepts writes."""
    backend.fail(
        Tables.VISA_PACKAGES,
        "select",
        BackendError("column visa_packages.processing_time does not exist", code="42703"),
    )


class TestIsSchemaShapeError:
    """Tests for is_schema_shape_error."""

    @pytest.mark.parametrize(
        "error",
        [
            BackendError("x", code="42P01"),
            BackendError("x", code="42703"),
            BackendError("x", code="PGRST204"),
            BackendError('relation "public.visa_packages" does not exist'),
            "Could not find the 'price' column of 'visa_packages' in the schema cache",
        ],
    )
    def test_shape_errors(self, error):
        assert is_schema_shape_error(error)

    @pytest.mark.parametrize(
        "error",
        [
            None,
            BackendError("permission denied for table visa_packages", code="42501"),
            BackendError("duplicate key value violates unique constraint", code="23505"),
            "timeout",
        ],
    )
    def test_other_errors(self, error):
        assert not is_schema_shape_error(error)


class TestFixVisaPackagesSchema:
    """Tests for SchemaFixService.fix_visa_packages_schema."""

    @pytest.mark.asyncio
    async def test_no_repair_when_check_passes(self, backend):
        service = SchemaFixService(backend)

        result = await service.fix_visa_packages_schema()

        assert result.success
        assert result.data == {"strategy": None, "attempts": []}
        assert backend.rpc_calls == []

    @pytest.mark.asyncio
    async def test_second_strategy_success_skips_third(self, backend):
        """execute_sql fails, the sentinel insert hits the foreign key, the RPC is never tried."""
        stale_schema_cache(backend)
        service = SchemaFixService(backend)

        result = await service.fix_visa_packages_schema()

        assert result.success
        assert result.data["strategy"] == "sentinel_insert"
        assert [a["strategy"] for a in result.data["attempts"]] == ["execute_sql", "sentinel_insert"]
        assert backend.rpc_names().count(Rpc.EXECUTE_SQL) == 1
        assert backend.rpc_names().count(Rpc.SAVE_VISA_PACKAGE) == 0
        assert len(backend.queries_for(Tables.VISA_PACKAGES, "insert")) == 1
        assert backend.tables[Tables.VISA_PACKAGES] == []

    @pytest.mark.asyncio
    async def test_first_strategy_success(self, backend):
        stale_schema_cache(backend)
        backend.rpc_handlers[Rpc.EXECUTE_SQL] = lambda params: None
        service = SchemaFixService(backend)

        result = await service.fix_visa_packages_schema()

        assert result.data["strategy"] == "execute_sql"
        assert backend.queries_for(Tables.VISA_PACKAGES, "insert") == []

    @pytest.mark.asyncio
    async def test_accepted_test_row_is_removed(self, backend):
        stale_schema_cache(backend)
        backend.seed(Tables.COUNTRIES, {"id": SENTINEL_UUID, "name": "Sentinel"})
        service = SchemaFixService(backend)

        result = await service.fix_visa_packages_schema()

        assert result.data["strategy"] == "sentinel_insert"
        assert backend.tables[Tables.VISA_PACKAGES] == []
        assert len(backend.queries_for(Tables.VISA_PACKAGES, "delete")) == 1

    @pytest.mark.asyncio
    async def test_third_strategy_tolerates_foreign_key_error(self, backend):
        backend.missing_columns[Tables.VISA_PACKAGES] = {"total_price"}

        def save_visa_package(params):
            assert params["p_country_id"] == SENTINEL_UUID
            raise BackendError("violates foreign key constraint", code="23503")

        backend.rpc_handlers[Rpc.SAVE_VISA_PACKAGE] = save_visa_package
        service = SchemaFixService(backend)

        result = await service.fix_visa_packages_schema()

        assert result.success
        assert result.data["strategy"] == "save_visa_package_rpc"
        assert len(result.data["attempts"]) == 3

    @pytest.mark.asyncio
    async def test_all_strategies_fail(self, backend):
        backend.missing_columns[Tables.VISA_PACKAGES] = {"total_price"}

        def save_visa_package(params):
            raise BackendError("function failed")

        backend.rpc_handlers[Rpc.SAVE_VISA_PACKAGE] = save_visa_package
        service = SchemaFixService(backend)

        result = await service.fix_visa_packages_schema()

        assert not result.success
        assert result.message == "Failed to fix schema: function failed"
        assert all(not a["success"] for a in result.data["attempts"])


class TestSchemaFixHelpers:
    """Tests for check_schema and the introspection wrappers."""

    @pytest.mark.asyncio
    async def test_check_schema_failure_data(self, backend):
        backend.missing_columns[Tables.VISA_PACKAGES] = {"processing_time"}
        service = SchemaFixService(backend)

        result = await service.check_schema()

        assert not result.success
        assert result.data["schema_error"] is True
        assert result.data["error"]["details"]["code"] == "42703"

    @pytest.mark.asyncio
    async def test_list_tables(self, backend):
        backend.rpc_handlers[Rpc.LIST_TABLES] = lambda params: [
            {"table_name": "countries"},
            {"table_name": "visa_packages"},
        ]
        service = SchemaFixService(backend)

        assert await service.list_tables() == ["countries", "visa_packages"]

    @pytest.mark.asyncio
    async def test_get_table_info_missing_procedure(self, backend):
        service = SchemaFixService(backend)
        assert await service.get_table_info("countries") == []


class TestSchemaValidator:
    """Tests for SchemaValidator."""

    @pytest.mark.asyncio
    async def test_validate_all_tables(self, backend):
        validator = SchemaValidator(backend)

        tables = await validator.validate()

        assert tables == list(EXPECTED_SCHEMA)

    @pytest.mark.asyncio
    async def test_missing_column(self, backend):
        backend.missing_columns[Tables.VISA_PACKAGES] = {"total_price"}
        validator = SchemaValidator(backend)

        with pytest.raises(SchemaMismatchError) as exc_info:
            await validator.validate()

        assert exc_info.value.table == Tables.VISA_PACKAGES
        assert exc_info.value.missing == ["total_price"]

    @pytest.mark.asyncio
    async def test_missing_table(self, backend):
        backend.missing_tables.add(Tables.LEGAL_PAGES)
        validator = SchemaValidator(backend)

        with pytest.raises(SchemaMismatchError) as exc_info:
            await validator.validate()

        assert exc_info.value.table == Tables.LEGAL_PAGES
        assert exc_info.value.missing == []

    @pytest.mark.asyncio
    async def test_other_errors_propagate(self, backend):
        backend.fail(Tables.COUNTRIES, "select", BackendError("permission denied", code="42501"))
        validator = SchemaValidator(backend)

        with pytest.raises(BackendError) as exc_info:
            await validator.validate()

        assert not isinstance(exc_info.value, SchemaMismatchError)
