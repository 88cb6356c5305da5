"""Tests for the table query builder."""

import pytest

from permitsy.models.backend import BackendClient
from permitsy.models.query import Filter, Query


@pytest.fixture
def client():
    """Unconnected client; building queries never touches the network."""
    return BackendClient("https://backend.test", "test-anon-key")


class TestFilter:
    """Tests for single column filters."""

    def test_supported_operators(self):
        assert Filter("slug", "eq", "terms-of-service").operator == "eq"
        assert Filter("approval_date", "neq", None).value is None
        assert Filter("id", "in", ["a", "b"]).value == ["a", "b"]

    def test_unknown_operator_rejected(self):
        with pytest.raises(ValueError):
            Filter("id", "like", "x")


class TestQueryBuilder:
    """Tests for the fluent builder."""

    def test_single_row_select(self, client):
        """Legal page lookup by slug."""
        query = client.table("legal_pages").select("*").eq("slug", "privacy-policy").single().query

        assert query.table == "legal_pages"
        assert query.action == "select"
        assert query.single is True
        assert query.filters == [Filter("slug", "eq", "privacy-policy")]

    def test_order_and_limit(self, client):
        query = (
            client.table("countries")
            .select("id,name,flag,popularity")
            .order("popularity", ascending=False)
            .order("name")
            .limit(6)
            .query
        )

        assert query.columns == "id,name,flag,popularity"
        assert query.order_by == [("popularity", False), ("name", True)]
        assert query.limit == 6

    def test_insert_without_representation(self, client):
        query = client.table("profiles").insert({"email": "a@b.co"}, returning=False).query

        assert query.action == "insert"
        assert query.payload == {"email": "a@b.co"}
        assert query.returning is False

    def test_upsert_on_conflict(self, client):
        query = client.table("visa_packages").upsert([{"country_id": "c1"}], on_conflict="country_id").query

        assert query.action == "upsert"
        assert query.on_conflict == "country_id"
        assert query.returning is True

    def test_delete_defaults_to_minimal(self, client):
        query = client.table("document_checklist").delete().in_("id", ("d1", "d2")).query

        assert query.action == "delete"
        assert query.returning is False
        assert query.filters == [Filter("id", "in", ["d1", "d2"])]

    def test_defaults(self):
        query = Query(table="countries")

        assert query.action == "select"
        assert query.columns == "*"
        assert query.limit is None
        assert not query.single
