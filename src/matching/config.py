"""Configuration for issue matching and checklist differencing."""

from dataclasses import Field, dataclass, fields, replace
import logging
import os
from pathlib import Path
from typing import Any

import yaml

log = logging.getLogger(__name__)

_ENV_OVERRIDES = {
    "ISSUE_MATCH_MIN_SCORE": "min_match_score",
    "ISSUE_MATCH_DUPLICATE_THRESHOLD": "duplicate_threshold",
    "ISSUE_MATCH_COVERAGE_THRESHOLD": "coverage_threshold",
}


def _cast_option(field_def: Field, value: Any) -> Any:
    caster = int if field_def.type in (int, "int") else float
    return caster(value)


@dataclass(frozen=True)
class MatchingConfig:
    """Thresholds and weights controlling matching, dedup and diffing."""

    min_token_length: int = 3

    description_weight: float = 5.0
    application_weight: float = 2.0
    root_cause_weight: float = 2.0
    checklist_weight: float = 1.0

    short_query_max_len: int = 6
    short_query_bonus: float = 1.0
    short_field_max_len: int = 24

    description_token_weight: float = 1.0
    application_token_weight: float = 1.0
    root_cause_token_weight: float = 0.5
    checklist_token_weight: float = 0.5

    min_match_score: float = 2.0

    duplicate_threshold: float = 0.45
    max_suggestions: int = 3

    coverage_threshold: float = 0.55

    @classmethod
    def from_mapping(cls, raw: dict[str, Any] | None) -> "MatchingConfig":
        """Build a config from a plain mapping, ignoring unknown keys."""
        if not raw:
            return cls()

        known = {f.name: f for f in fields(cls)}
        values: dict[str, Any] = {}
        for key, value in raw.items():
            field_def = known.get(key)
            if field_def is None:
                log.warning(f"Ignoring unknown matching option: {key}")
                continue
            try:
                values[key] = _cast_option(field_def, value)
            except (TypeError, ValueError):
                log.warning(f"Ignoring invalid value for {key}: {value!r}")
        return cls(**values)

    def with_env_overrides(self, environ: dict[str, str] | None = None) -> "MatchingConfig":
        """Apply ISSUE_MATCH_* environment overrides on top of this config."""
        env = os.environ if environ is None else environ
        known = {f.name: f for f in fields(self)}
        overrides: dict[str, Any] = {}
        for env_name, field_name in _ENV_OVERRIDES.items():
            raw = env.get(env_name)
            if raw is None or not raw.strip():
                continue
            try:
                overrides[field_name] = _cast_option(known[field_name], raw.strip())
            except ValueError:
                log.warning(f"Ignoring invalid value for {env_name}: {raw!r}")

        if not overrides:
            return self
        return replace(self, **overrides)


DEFAULT_MATCHING_CONFIG = MatchingConfig()


def load_matching_config(path: str | Path | None = None) -> MatchingConfig:
    """Load config from a YAML file, then apply environment overrides.

    A missing ``path`` yields the defaults. The file may either hold the
    options at the top level or under a ``matching:`` key.
    """
    if path is None:
        return DEFAULT_MATCHING_CONFIG.with_env_overrides()

    config_path = Path(path)
    if not config_path.exists():
        raise FileNotFoundError(f"Config file not found: {config_path}")

    try:
        raw = yaml.safe_load(config_path.read_text(encoding="utf-8")) or {}
    except yaml.YAMLError as exc:
        raise ValueError(f"Invalid config file {config_path}: {exc}") from exc
    if not isinstance(raw, dict):
        raise ValueError(f"Config file must contain a mapping: {config_path}")

    section = raw.get("matching", raw)
    if not isinstance(section, dict):
        raise ValueError(f"'matching' section must be a mapping: {config_path}")

    log.info(f"Loaded matching config from {config_path}")
    return MatchingConfig.from_mapping(section).with_env_overrides()
