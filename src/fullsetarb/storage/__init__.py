"""DuckDB persistence for detected opportunities."""

from fullsetarb.storage.db import get_connection, init_schema
from fullsetarb.storage.opportunities import OpportunityRepository, SaveResult, open_repository

__all__ = ["OpportunityRepository", "SaveResult", "get_connection", "init_schema", "open_repository"]
