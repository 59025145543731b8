"""Local storage primitives shared across contexts."""

from shared_kernel.storage.exceptions import StorageError
from shared_kernel.storage.value_objects import (
    Collection,
    DomainRecord,
    FinancialInfo,
    Identification,
    IndexFilter,
    MarketplaceListing,
    UserPreference,
)

__all__ = [
    "Collection",
    "DomainRecord",
    "FinancialInfo",
    "Identification",
    "IndexFilter",
    "MarketplaceListing",
    "StorageError",
    "UserPreference",
]
