"""Assessment session engine: question generation and practice sessions."""

from .config import (
    ConfigError,
    EngineConfig,
    default_config,
    load_config,
)
from .errors import (
    ConfigurationError,
    EmptyResponseError,
    EntitlementError,
    GenerationError,
    NetworkError,
    ParseError,
    ValidationError,
)
from .extractor import extract
from .gateway import GenerationGateway, plan_question_count
from .models import (
    Account,
    Medium,
    Mode,
    PlanEntitlement,
    PlanTier,
    Question,
    ReviewItem,
    SessionParams,
    SessionSnapshot,
    UsageCounters,
    ViewState,
)
from .service import PracticeEngine
from .session import PracticeSession
from .timer import SessionTimer, format_remaining
from .usage import UsageAccountant
from .validator import validate

__all__ = [
    "ConfigError",
    "EngineConfig",
    "default_config",
    "load_config",
    "GenerationError",
    "ConfigurationError",
    "EntitlementError",
    "NetworkError",
    "EmptyResponseError",
    "ParseError",
    "ValidationError",
    "extract",
    "validate",
    "GenerationGateway",
    "plan_question_count",
    "Account",
    "Medium",
    "Mode",
    "PlanEntitlement",
    "PlanTier",
    "Question",
    "ReviewItem",
    "SessionParams",
    "SessionSnapshot",
    "UsageCounters",
    "ViewState",
    "PracticeEngine",
    "PracticeSession",
    "SessionTimer",
    "format_remaining",
    "UsageAccountant",
]
