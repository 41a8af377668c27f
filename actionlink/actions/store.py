"""
Action Store - persistence contract and Supabase implementation

The store maps short_id -> action row. Rows are written once at creation
and never updated or deleted. Uniqueness of short_id is the database's
job (unique constraint); the store only translates a violation into
ShortIdConflictError so the creation path can regenerate.

Expected table (see supabase/migrations):
    actions(id, short_id unique, action_type, recipient_address,
            tip_amount_eth, contract_address, token_id, price,
            description, created_at)
"""

from abc import ABC, abstractmethod
from typing import Any, Dict, Optional
import logging

from postgrest.exceptions import APIError
from supabase import Client

from actionlink.core.exceptions import ShortIdConflictError, StoreUnavailableError

logger = logging.getLogger(__name__)

# PostgreSQL unique_violation
UNIQUE_VIOLATION = "23505"

ACTION_COLUMNS = (
    "id",
    "short_id",
    "action_type",
    "recipient_address",
    "tip_amount_eth",
    "contract_address",
    "token_id",
    "price",
    "description",
    "created_at",
)


class ActionStore(ABC):
    """Read/write contract against the actions table"""

    @abstractmethod
    async def insert(self, row: Dict[str, Any]) -> Dict[str, Any]:
        """
        Insert a new action row.

        Returns:
            The stored row including store-assigned columns (id)

        Raises:
            ShortIdConflictError: short_id already exists
            StoreUnavailableError: any other persistence failure
        """

    @abstractmethod
    async def get_by_short_id(self, short_id: str) -> Optional[Dict[str, Any]]:
        """
        Look up a row by its public short id.

        Returns:
            The row, or None if no row has that short id

        Raises:
            StoreUnavailableError: persistence failure
        """

    @abstractmethod
    async def health_check(self) -> None:
        """
        Cheap read proving the store is reachable.

        Raises:
            StoreUnavailableError: store cannot be read
        """


class SupabaseActionStore(ActionStore):
    """ActionStore backed by a Supabase (PostgREST) table"""

    def __init__(self, client: Client, table: str = "actions"):
        self.client = client
        self.table = table

    async def insert(self, row: Dict[str, Any]) -> Dict[str, Any]:
        try:
            response = self.client.table(self.table).insert(row).execute()
        except APIError as e:
            if str(e.code) == UNIQUE_VIOLATION:
                logger.warning(f"short_id collision on insert: {row.get('short_id')}")
                raise ShortIdConflictError(row.get("short_id", ""))
            logger.error(f"Error inserting action: {e.message}")
            raise StoreUnavailableError(f"Failed to store action: {e.message}") from e
        except Exception as e:
            logger.error(f"Error inserting action: {e}")
            raise StoreUnavailableError("Failed to store action") from e

        if not response.data:
            raise StoreUnavailableError("Failed to store action: no row returned")

        return response.data[0]

    async def get_by_short_id(self, short_id: str) -> Optional[Dict[str, Any]]:
        try:
            response = self.client.table(self.table) \
                .select("*") \
                .eq("short_id", short_id) \
                .limit(1) \
                .execute()
        except Exception as e:
            logger.error(f"Error fetching action {short_id}: {e}")
            raise StoreUnavailableError("Failed to read action") from e

        if not response.data:
            return None

        return response.data[0]

    async def health_check(self) -> None:
        try:
            self.client.table(self.table).select("id").limit(1).execute()
        except Exception as e:
            logger.error(f"Action store health check failed: {e}")
            raise StoreUnavailableError("Action store unreachable") from e
