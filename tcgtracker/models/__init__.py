from tcgtracker.models.card import (
    DEFAULT_CONDITION,
    CardCondition,
    CatalogRecord,
    first_price,
)
from tcgtracker.models.db import Base, CatalogCardDB, CollectionCardDB
from tcgtracker.models.failure import (
    FailureDetail,
    FailureKind,
    InvalidFieldError,
    KnownError,
    MissingFieldsError,
    NotFoundError,
    SyncConflictError,
    classify_store_error,
)
from tcgtracker.models.sync_status import SyncState, SyncStatus, SyncStatusRegister

__all__ = [
    "DEFAULT_CONDITION",
    "Base",
    "CardCondition",
    "CatalogCardDB",
    "CatalogRecord",
    "CollectionCardDB",
    "FailureDetail",
    "FailureKind",
    "InvalidFieldError",
    "KnownError",
    "MissingFieldsError",
    "NotFoundError",
    "SyncConflictError",
    "SyncState",
    "SyncStatus",
    "SyncStatusRegister",
    "classify_store_error",
    "first_price",
]
