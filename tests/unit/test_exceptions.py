"""Tests for custom exceptions and backend error classification."""

from permitsy.core.exceptions import (
    BackendConnectionError,
    BackendError,
    MissingEnvironmentVariableError,
    PermitsyError,
    RecordNotFoundError,
    SchemaMismatchError,
    ValidationError,
)


class TestPermitsyError:
    """Tests for the base exception."""

    def test_to_dict(self):
        error = PermitsyError("Something failed", recoverable=False, details={"a": 1})

        data = error.to_dict()

        assert data["error"] == "PermitsyError"
        assert data["message"] == "Something failed"
        assert data["recoverable"] is False
        assert data["details"] == {"a": 1}
        assert "timestamp" in data

    def test_validation_error_field(self):
        error = ValidationError("A valid email address is required", field="email")

        assert error.field == "email"
        assert "email" in error.message
        assert error.details == {"field": "email"}

    def test_missing_environment_variable(self):
        error = MissingEnvironmentVariableError("BACKEND_URL")

        assert "BACKEND_URL" in error.message
        assert error.recoverable is False

    def test_record_not_found(self):
        error = RecordNotFoundError("Blog", "42")

        assert error.message == "Blog with id 42 not found"
        assert error.details["resource_id"] == "42"


class TestBackendError:
    """Tests for backend error parsing and classification."""

    def test_from_json_body(self):
        error = BackendError.from_response(
            409,
            {
                "code": "23505",
                "message": 'duplicate key value violates unique constraint "legal_pages_slug_key"',
                "details": "Key (slug)=(privacy-policy) already exists.",
                "hint": None,
            },
        )

        assert error.status == 409
        assert error.code == "23505"
        assert error.is_unique_violation
        assert not error.is_foreign_key_violation
        assert error.details["details"].startswith("Key (slug)")

    def test_from_text_body(self):
        error = BackendError.from_response(502, "Bad Gateway")
        assert error.message == "Bad Gateway"
        assert error.code is None

    def test_from_empty_body(self):
        error = BackendError.from_response(500, None)
        assert error.message == "HTTP 500"

    def test_foreign_key_violation(self):
        error = BackendError("violates foreign key constraint", code="23503")
        assert error.is_foreign_key_violation

    def test_missing_table_by_code_and_message(self):
        assert BackendError("whatever", code="42P01").is_missing_table
        assert BackendError("Could not find the table", code="PGRST205").is_missing_table
        assert BackendError('relation "public.legal_pages" does not exist').is_missing_table

    def test_missing_column_is_not_missing_table(self):
        error = BackendError("column visa_packages.total_price does not exist", code="42703")

        assert error.is_missing_column
        assert not error.is_missing_table

    def test_missing_column_from_schema_cache_message(self):
        error = BackendError(
            "Could not find the 'processing_time' column of 'visa_packages' in the schema cache"
        )
        assert error.is_missing_column

    def test_not_found(self):
        assert BackendError("JSON object requested", code="PGRST116").is_not_found
        assert not BackendError("other").is_not_found

    def test_connection_error_is_recoverable(self):
        error = BackendConnectionError("timed out")
        assert isinstance(error, BackendError)
        assert error.recoverable is True


class TestSchemaMismatchError:
    """Tests for deployment schema errors."""

    def test_missing_columns_message(self):
        error = SchemaMismatchError("visa_packages", ["total_price", "processing_time"])

        assert error.table == "visa_packages"
        assert error.missing == ["total_price", "processing_time"]
        assert "total_price, processing_time" in error.message
        assert "migrations" in error.message

    def test_missing_table_message(self):
        error = SchemaMismatchError("legal_pages", reason="relation does not exist")

        assert error.missing == []
        assert "legal_pages" in error.message
        assert "relation does not exist" in error.message
