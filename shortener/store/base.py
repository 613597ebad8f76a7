"""Abstract base class for short code mapping stores."""

from abc import ABC, abstractmethod
from datetime import datetime
from typing import List, Optional

from ..models import UrlMapping


class MappingStoreBase(ABC):
    """Key-value store of short code -> UrlMapping.

    The store does not reject overwrites; callers check ``exists`` before
    committing to a generated code.
    """

    backend_name = "base"

    @abstractmethod
    async def put(
        self,
        short_code: str,
        original_url: str,
        created_at: datetime,
        expires_at: Optional[datetime] = None,
    ) -> UrlMapping:
        """Insert or overwrite an active mapping.

        Args:
            short_code: The short code to bind
            original_url: The original long URL
            created_at: Creation timestamp
            expires_at: Optional expiration timestamp

        Returns:
            The stored mapping
        """
        pass

    @abstractmethod
    async def get(self, short_code: str) -> Optional[UrlMapping]:
        """Get the stored mapping, accessible or not.

        Args:
            short_code: The short code to lookup

        Returns:
            The mapping if the key exists, None otherwise
        """
        pass

    @abstractmethod
    async def exists(self, short_code: str) -> bool:
        """Check if a short code is bound."""
        pass

    @abstractmethod
    async def deactivate(self, short_code: str) -> bool:
        """Soft delete a mapping.

        Args:
            short_code: The short code to deactivate

        Returns:
            True if an active mapping was found and flipped, False otherwise
        """
        pass

    @abstractmethod
    async def list_mappings(self) -> List[UrlMapping]:
        """Return every stored mapping.

        Not atomic across keys; concurrent writers may be partially visible.
        """
        pass

    async def health_check(self) -> bool:
        """Check if the store is reachable."""
        return True

    async def close(self) -> None:
        """Release connections held by the store."""
        pass
