from lendrecon.validation.bulk import (
    BulkFailure,
    BulkResult,
    BulkValidator,
    EntityValidation,
    EverythingResult,
)
from lendrecon.validation.classifier import (
    DEFAULT_POLICY,
    Classification,
    TolerancePolicy,
    Verdict,
    classify,
    compute_percentage,
)
from lendrecon.validation.types import (
    EntryState,
    PositionValidation,
    ReserveIndexValidation,
    ReserveValidation,
    UserValidation,
)
from lendrecon.validation.validators import (
    BalanceMode,
    ReconciliationTarget,
    ReserveValidator,
    Scope,
    Side,
)

__all__ = (
    "DEFAULT_POLICY",
    "BalanceMode",
    "BulkFailure",
    "BulkResult",
    "BulkValidator",
    "Classification",
    "EntityValidation",
    "EntryState",
    "EverythingResult",
    "PositionValidation",
    "ReconciliationTarget",
    "ReserveIndexValidation",
    "ReserveValidation",
    "ReserveValidator",
    "Scope",
    "Side",
    "TolerancePolicy",
    "UserValidation",
    "Verdict",
    "classify",
    "compute_percentage",
)
