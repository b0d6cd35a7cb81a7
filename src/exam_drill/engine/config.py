"""TOML configuration for the practice engine.

Defaults live in ``_DEFAULTS``; a user file is merged on top of them and the
result is validated into frozen dataclasses. Unknown keys are rejected so
typos surface instead of silently falling back to defaults.
"""

from __future__ import annotations

import copy
import os
import tomllib
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, Mapping, MutableMapping, Optional

from ..core.workspace import ensure_workspace
from .models import Mode, PlanEntitlement, PlanTier

CONFIG_PATH_ENV = "EXAM_DRILL_CONFIG"
UNLIMITED = "unlimited"


class ConfigError(RuntimeError):
    """Raised when configuration parsing or validation fails."""


@dataclass(frozen=True)
class OpenAIConfig:
    model: str
    temperature: float
    max_output_tokens: int
    request_timeout_seconds: int
    api_base: Optional[str]


@dataclass(frozen=True)
class GenerationConfig:
    curriculum: str
    syllabus_authority: str
    default_medium: str


@dataclass(frozen=True)
class TimingConfig:
    reference_paper_minutes: int
    reference_paper_questions: int

    @property
    def seconds_per_question(self) -> float:
        total_seconds = self.reference_paper_minutes * 60
        return total_seconds / self.reference_paper_questions

    def budget_for(self, question_count: int) -> int:
        """Whole seconds allowed for ``question_count`` questions."""

        total_seconds = question_count * self.reference_paper_minutes * 60
        return total_seconds // self.reference_paper_questions


@dataclass(frozen=True)
class UsageConfig:
    full_paper_threshold: int


@dataclass(frozen=True)
class LoggingConfig:
    level: str
    verbose: bool


@dataclass(frozen=True)
class EngineConfig:
    openai: OpenAIConfig
    generation: GenerationConfig
    timing: TimingConfig
    usage: UsageConfig
    plans: Mapping[PlanTier, PlanEntitlement]
    logging: LoggingConfig

    def entitlement_for(self, tier: PlanTier) -> PlanEntitlement:
        return self.plans[tier]


def _merge_dict(
    base: MutableMapping[str, Any],
    override: Mapping[str, Any],
    *,
    path: str = "",
) -> None:
    for key, value in override.items():
        dotted = f"{path}{key}"
        if key not in base:
            raise ConfigError(f"Unknown configuration key '{dotted}'.")
        if isinstance(base[key], MutableMapping):
            if not isinstance(value, Mapping):
                raise ConfigError(
                    "Expected table for '{0}', found {1}.".format(
                        dotted, type(value).__name__
                    )
                )
            _merge_dict(base[key], value, path=f"{dotted}.")
        else:
            base[key] = value


def _require_positive_int(value: Any, *, field: str) -> int:
    if isinstance(value, bool) or not isinstance(value, int) or value <= 0:
        raise ConfigError(f"'{field}' must be a positive integer.")
    return value


def _require_bool(value: Any, *, field: str) -> bool:
    if not isinstance(value, bool):
        raise ConfigError(f"'{field}' must be a boolean.")
    return value


def _require_float_range(
    value: Any, *, field: str, min_value: float, max_value: float
) -> float:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise ConfigError(f"'{field}' must be a number.")
    number = float(value)
    if not (min_value <= number <= max_value):
        raise ConfigError(
            f"'{field}' must be between {min_value} and {max_value}."
        )
    return number


def _require_string(value: Any, *, field: str) -> str:
    if not isinstance(value, str) or not value.strip():
        raise ConfigError(f"'{field}' must be a non-empty string.")
    return value.strip()


def _coerce_optional_string(value: Any, *, field: str) -> Optional[str]:
    if value is None:
        return None
    return _require_string(value, field=field)


def _coerce_quota(value: Any, *, field: str) -> Optional[int]:
    if value is None or value == UNLIMITED:
        return None
    if isinstance(value, bool) or not isinstance(value, int) or value < 0:
        raise ConfigError(
            f"'{field}' must be a non-negative integer or '{UNLIMITED}'."
        )
    return value


def _coerce_modes(value: Any, *, field: str) -> frozenset[Mode]:
    if not isinstance(value, list) or not value:
        raise ConfigError(f"'{field}' must be a non-empty list of modes.")
    modes = set()
    for item in value:
        try:
            modes.add(Mode(str(item).strip().lower()))
        except ValueError as exc:
            known = ", ".join(mode.value for mode in Mode)
            raise ConfigError(
                f"'{field}' contains unknown mode '{item}' (known: {known})."
            ) from exc
    return frozenset(modes)


def _build_openai(section: Mapping[str, Any]) -> OpenAIConfig:
    prefix = "providers.openai"
    return OpenAIConfig(
        model=_require_string(section.get("model"), field=f"{prefix}.model"),
        temperature=_require_float_range(
            section.get("temperature"),
            field=f"{prefix}.temperature",
            min_value=0.0,
            max_value=2.0,
        ),
        max_output_tokens=_require_positive_int(
            section.get("max_output_tokens"),
            field=f"{prefix}.max_output_tokens",
        ),
        request_timeout_seconds=_require_positive_int(
            section.get("request_timeout_seconds"),
            field=f"{prefix}.request_timeout_seconds",
        ),
        api_base=_coerce_optional_string(
            section.get("api_base"), field=f"{prefix}.api_base"
        ),
    )


def _build_generation(section: Mapping[str, Any]) -> GenerationConfig:
    return GenerationConfig(
        curriculum=_require_string(
            section.get("curriculum"), field="generation.curriculum"
        ),
        syllabus_authority=_require_string(
            section.get("syllabus_authority"),
            field="generation.syllabus_authority",
        ),
        default_medium=_require_string(
            section.get("default_medium"), field="generation.default_medium"
        ),
    )


def _build_timing(section: Mapping[str, Any]) -> TimingConfig:
    return TimingConfig(
        reference_paper_minutes=_require_positive_int(
            section.get("reference_paper_minutes"),
            field="timing.reference_paper_minutes",
        ),
        reference_paper_questions=_require_positive_int(
            section.get("reference_paper_questions"),
            field="timing.reference_paper_questions",
        ),
    )


def _build_usage(section: Mapping[str, Any]) -> UsageConfig:
    return UsageConfig(
        full_paper_threshold=_require_positive_int(
            section.get("full_paper_threshold"),
            field="usage.full_paper_threshold",
        )
    )


def _build_plan(tier: PlanTier, section: Mapping[str, Any]) -> PlanEntitlement:
    prefix = f"plans.{tier.value}"
    return PlanEntitlement(
        tier=tier,
        quick_count=_require_positive_int(
            section.get("quick_count"), field=f"{prefix}.quick_count"
        ),
        paper_count=_require_positive_int(
            section.get("paper_count"), field=f"{prefix}.paper_count"
        ),
        modes=_coerce_modes(section.get("modes"), field=f"{prefix}.modes"),
        monthly_questions=_coerce_quota(
            section.get("monthly_questions"),
            field=f"{prefix}.monthly_questions",
        ),
        monthly_papers=_coerce_quota(
            section.get("monthly_papers"), field=f"{prefix}.monthly_papers"
        ),
    )


def _build_logging(section: Mapping[str, Any]) -> LoggingConfig:
    level = _require_string(
        section.get("level"), field="logging.level"
    ).upper()
    if level not in {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}:
        raise ConfigError(
            "logging.level must be one of "
            "DEBUG, INFO, WARNING, ERROR, CRITICAL."
        )
    verbose = _require_bool(section.get("verbose"), field="logging.verbose")
    return LoggingConfig(level=level, verbose=verbose)


def _build_config(tree: Mapping[str, Any]) -> EngineConfig:
    plans = tree["plans"]
    return EngineConfig(
        openai=_build_openai(tree["providers"]["openai"]),
        generation=_build_generation(tree["generation"]),
        timing=_build_timing(tree["timing"]),
        usage=_build_usage(tree["usage"]),
        plans={
            tier: _build_plan(tier, plans[tier.value]) for tier in PlanTier
        },
        logging=_build_logging(tree["logging"]),
    )


def _load_toml(path: Path) -> Mapping[str, Any]:
    try:
        with path.open("rb") as fh:
            return tomllib.load(fh)
    except FileNotFoundError as exc:
        raise ConfigError(f"Config file not found: {path}") from exc
    except tomllib.TOMLDecodeError as exc:
        raise ConfigError(f"Failed to parse config TOML: {exc}") from exc


def resolve_config_path(
    *,
    explicit_path: Optional[Path] = None,
    env: Mapping[str, str] | None = None,
    workspace_path: Optional[Path] = None,
) -> Path:
    env_map = os.environ if env is None else env
    if explicit_path is not None:
        return explicit_path.expanduser().resolve()
    env_override = env_map.get(CONFIG_PATH_ENV)
    if env_override:
        return Path(env_override).expanduser().resolve()
    return ensure_workspace(env=env_map, path=workspace_path).config_file


def default_tree() -> Dict[str, Any]:
    """Return a copy of the default configuration tree."""

    return copy.deepcopy(_DEFAULTS)


def default_config() -> EngineConfig:
    return _build_config(default_tree())


def load_config(
    *,
    explicit_path: Optional[Path] = None,
    env: Mapping[str, str] | None = None,
    workspace_path: Optional[Path] = None,
) -> EngineConfig:
    """Load the TOML config, applying defaults and validation.

    An explicitly requested file must exist. The implicit workspace file is
    optional; without it the defaults apply.
    """

    path = resolve_config_path(
        explicit_path=explicit_path, env=env, workspace_path=workspace_path
    )
    tree = default_tree()
    explicit = explicit_path is not None or bool(
        (os.environ if env is None else env).get(CONFIG_PATH_ENV)
    )
    if explicit or path.exists():
        toml_data = _load_toml(path)
        _merge_dict(tree, toml_data)
    return _build_config(tree)


def config_template() -> str:
    """Return the TOML template recommended for new installs."""

    return _CONFIG_TEMPLATE.strip() + "\n"


def write_template(
    path: Path, *, overwrite: bool = False, mode: int = 0o600
) -> Path:
    """Write the default template to ``path``."""

    path.parent.mkdir(parents=True, exist_ok=True)
    if path.exists() and not overwrite:
        raise ConfigError(f"Config already exists: {path}")
    path.write_text(config_template(), encoding="utf-8")
    try:
        path.chmod(mode)
    except PermissionError:  # pragma: no cover - depends on filesystem
        pass
    return path


_ALL_MODES = [mode.value for mode in Mode]

_DEFAULTS: Dict[str, Any] = {
    "providers": {
        "openai": {
            "model": "gpt-4o-mini",
            "temperature": 0.4,
            "max_output_tokens": 8000,
            "request_timeout_seconds": 120,
            "api_base": None,
        },
    },
    "generation": {
        "curriculum": "Sri Lankan Advanced Level (A/L)",
        "syllabus_authority": "Sri Lankan Ministry of Education",
        "default_medium": "English",
    },
    "timing": {
        "reference_paper_minutes": 60,
        "reference_paper_questions": 50,
    },
    "usage": {
        "full_paper_threshold": 25,
    },
    "plans": {
        "free": {
            "quick_count": 10,
            "paper_count": 25,
            "modes": ["quick"],
            "monthly_questions": 20,
            "monthly_papers": UNLIMITED,
        },
        "pro": {
            "quick_count": 10,
            "paper_count": 25,
            "modes": list(_ALL_MODES),
            "monthly_questions": UNLIMITED,
            "monthly_papers": 10,
        },
        "plus": {
            "quick_count": 20,
            "paper_count": 50,
            "modes": list(_ALL_MODES),
            "monthly_questions": UNLIMITED,
            "monthly_papers": UNLIMITED,
        },
    },
    "logging": {
        "level": "INFO",
        "verbose": False,
    },
}


_CONFIG_TEMPLATE = """
# exam-drill configuration

[providers.openai]
model = "gpt-4o-mini"
# Sampling temperature (0.0-2.0)
temperature = 0.4
# A 50-question paper with explanations needs a generous output budget
max_output_tokens = 8000
request_timeout_seconds = 120
# api_base = "https://api.openai.com/v1"

[generation]
curriculum = "Sri Lankan Advanced Level (A/L)"
syllabus_authority = "Sri Lankan Ministry of Education"
# Sinhala, English or Tamil
default_medium = "English"

[timing]
# Timed sessions get reference_paper_minutes for every
# reference_paper_questions questions (72 seconds per question by default)
reference_paper_minutes = 60
reference_paper_questions = 50

[usage]
# Past/model sessions with at least this many questions count as a paper
full_paper_threshold = 25

# Per-plan allowances. Quotas take an integer or "unlimited".
[plans.free]
quick_count = 10
paper_count = 25
modes = ["quick"]
monthly_questions = 20
monthly_papers = "unlimited"

[plans.pro]
quick_count = 10
paper_count = 25
modes = ["quick", "topic", "past", "model"]
monthly_questions = "unlimited"
monthly_papers = 10

[plans.plus]
quick_count = 20
paper_count = 50
modes = ["quick", "topic", "past", "model"]
monthly_questions = "unlimited"
monthly_papers = "unlimited"

[logging]
level = "INFO"
verbose = false
"""
