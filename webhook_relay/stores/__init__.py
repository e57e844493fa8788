"""Storage for hits, forward rules and aliases.

Each store has an abstract interface with an in-memory implementation
(tests, development) and a PostgreSQL implementation (production).
"""

from webhook_relay.stores.inmemory import (
    InMemoryAliasStore,
    InMemoryForwardRuleStore,
    InMemoryHitStore,
)
from webhook_relay.stores.interface import AliasStore, ForwardRuleStore, HitStore
from webhook_relay.stores.models import (
    Alias,
    ForwardOutcome,
    ForwardRule,
    Hit,
    HitTotals,
    NewHit,
)

__all__ = [
    # Interfaces
    "HitStore",
    "ForwardRuleStore",
    "AliasStore",
    # In-memory
    "InMemoryHitStore",
    "InMemoryForwardRuleStore",
    "InMemoryAliasStore",
    # Models
    "Hit",
    "NewHit",
    "HitTotals",
    "ForwardRule",
    "ForwardOutcome",
    "Alias",
]
