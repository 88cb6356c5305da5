"""Deploy-time check that the backend exposes the expected schema."""

from loguru import logger

from permitsy.core.exceptions import SchemaMismatchError
from permitsy.models.backend import BackendClient
from permitsy.services.schema_fix_service import SchemaValidator


async def check_schema(backend: BackendClient) -> bool:
    """
    Validate every expected table and column.

    Args:
        backend: Connected backend client

    Returns:
        True when the schema matches, False on a mismatch
    """
    try:
        tables = await SchemaValidator(backend).validate()
    except SchemaMismatchError as e:
        logger.error(f"Schema mismatch: {e.message}")
        return False
    logger.info(f"Schema matches for tables: {', '.join(tables)}")
    return True
