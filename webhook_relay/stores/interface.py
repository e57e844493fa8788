"""Abstract store interfaces for hits, forward rules and aliases."""

from abc import ABC, abstractmethod
from datetime import datetime

from webhook_relay.stores.models import Alias, ForwardRule, Hit, HitTotals, NewHit


class HitStore(ABC):
    """Append-only storage for received webhook requests.

    Each mutation is a single-row insert/update or a single bulk delete;
    no multi-statement transactions are required.
    """

    @abstractmethod
    async def record(self, hit: NewHit) -> int:
        """Insert a hit and return its id."""
        pass

    @abstractmethod
    async def get(self, hit_id: int) -> Hit | None:
        """Get a hit by id."""
        pass

    @abstractmethod
    async def set_forward_outcome(
        self,
        hit_id: int,
        *,
        status: int,
        forward_ms: int,
        error: str | None,
    ) -> None:
        """Patch the forward_* columns of a hit."""
        pass

    @abstractmethod
    async def query(
        self,
        *,
        start: datetime | None = None,
        end: datetime | None = None,
        endpoint: str | None = None,
        limit: int = 500,
        newest_first: bool = True,
    ) -> list[Hit]:
        """List hits with received_at in [start, end), optionally for one endpoint."""
        pass

    @abstractmethod
    async def purge_before(self, cutoff: datetime) -> int:
        """Delete hits received strictly before cutoff; return the count."""
        pass

    @abstractmethod
    async def totals(self) -> HitTotals:
        """Total hit count and average response time."""
        pass

    @abstractmethod
    async def count_since(self, since: datetime) -> int:
        """Count hits received at or after since."""
        pass

    @abstractmethod
    async def oldest_received_at(self) -> datetime | None:
        """Receipt time of the oldest stored hit."""
        pass

    async def storage_size_bytes(self) -> int | None:
        """Approximate on-disk size of the backing database, if known."""
        return None


class ForwardRuleStore(ABC):
    """Per-endpoint forwarding configuration."""

    @abstractmethod
    async def get(self, endpoint: str) -> ForwardRule | None:
        """Get the rule for an endpoint."""
        pass

    @abstractmethod
    async def list_all(self) -> list[ForwardRule]:
        """List all rules."""
        pass

    @abstractmethod
    async def upsert(
        self,
        endpoint: str,
        forward_url: str,
        *,
        enabled: bool = True,
        persist: bool = True,
    ) -> ForwardRule:
        """Create or replace the rule for an endpoint."""
        pass

    @abstractmethod
    async def delete(self, endpoint: str) -> bool:
        """Delete the rule for an endpoint; True if one existed."""
        pass


class AliasStore(ABC):
    """Labels for opaque identifiers found in payloads."""

    @abstractmethod
    async def list_all(self) -> list[Alias]:
        """List all aliases."""
        pass

    @abstractmethod
    async def upsert(self, value: str, label: str) -> Alias:
        """Create an alias or update the label of an existing value."""
        pass

    @abstractmethod
    async def delete(self, alias_id: int) -> bool:
        """Delete an alias by id; True if one existed."""
        pass

    async def label_map(self) -> dict[str, str]:
        """Map of value to label for every alias."""
        return {alias.value: alias.label for alias in await self.list_all()}
