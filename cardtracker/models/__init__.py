from cardtracker.models.catalog import (
    REQUIRED_KEYS,
    TAG_CATEGORIES,
    Card,
    CardSet,
    Catalog,
    OwnershipRecord,
    Parallel,
    Product,
    Tag,
    load_catalog,
)
from cardtracker.models.failure import (
    STANDARD_MESSAGES,
    STANDARD_SUGGESTIONS,
    ApiResponse,
    EmptyExportError,
    FailureDetail,
    FailureKind,
    InvalidCatalogError,
    InvalidStateError,
    KnownError,
    MissingParallelError,
    MissingSelectionError,
    NoParallelsError,
    NotFoundError,
    OutcomeType,
    StorageError,
    ValidationError,
    create_known_failure,
    create_success,
    create_unknown_failure,
    finalize_response,
)
from cardtracker.models.owned import (
    OwnedEntry,
    build_owned_aggregate,
    owned_key,
    priced_count,
)
from cardtracker.models.pending import (
    EntryTags,
    ExportChange,
    ExportDocument,
    PendingDraft,
    PendingEntry,
)

__all__ = [
    # Catalog
    "REQUIRED_KEYS",
    "TAG_CATEGORIES",
    "Card",
    "CardSet",
    "Catalog",
    "OwnershipRecord",
    "Parallel",
    "Product",
    "Tag",
    "load_catalog",
    # Failure
    "STANDARD_MESSAGES",
    "STANDARD_SUGGESTIONS",
    "ApiResponse",
    "EmptyExportError",
    "FailureDetail",
    "FailureKind",
    "InvalidCatalogError",
    "InvalidStateError",
    "KnownError",
    "MissingParallelError",
    "MissingSelectionError",
    "NoParallelsError",
    "NotFoundError",
    "OutcomeType",
    "StorageError",
    "ValidationError",
    "create_known_failure",
    "create_success",
    "create_unknown_failure",
    "finalize_response",
    # Owned
    "OwnedEntry",
    "build_owned_aggregate",
    "owned_key",
    "priced_count",
    # Pending
    "EntryTags",
    "ExportChange",
    "ExportDocument",
    "PendingDraft",
    "PendingEntry",
]
