"""
Pipeline configuration.

Options are merged from several sources with precedence:
overrides > environment variables > .env file > defaults
"""

from __future__ import annotations

import json
import os
from dataclasses import dataclass, field, fields
from typing import Any, Mapping, Optional

from dotenv import dotenv_values

from .problem import DEFAULT_TITLE, DEFAULT_TYPE_TEMPLATE


DEFAULT_LABELS: dict[str, str] = {
    "ResourceNotFoundFault": "NotFoundException",
}


class ConfigError(Exception):
    """Raised when configuration validation fails."""
    pass


@dataclass(frozen=True)
class PipelineOptions:
    """
    Options shared by the exception pipeline, its classifiers and mappers.

    Attributes:
        default_title: Title used when nothing more specific is known
        problem_type_template: Template for problem type URIs, must contain ``{slug}``
        problem_instance_template: Template for instance URIs, must contain ``{number}``
        environment: Deployment environment name
        expose_detail: Let classifiers and mappers include verbose detail
            (always on in development environments)
        content_type: Content type of serialized problem responses
        labels: Internal fault type names mapped to public log labels
    """

    default_title: str = DEFAULT_TITLE
    problem_type_template: str = DEFAULT_TYPE_TEMPLATE
    problem_instance_template: str = "{number}"
    environment: str = "production"
    expose_detail: bool = False
    content_type: str = "application/json"
    labels: Mapping[str, str] = field(default_factory=lambda: dict(DEFAULT_LABELS))

    def __post_init__(self):
        if "{slug}" not in self.problem_type_template:
            raise ConfigError(
                f"problem_type_template must contain '{{slug}}': {self.problem_type_template!r}"
            )
        if "{number}" not in self.problem_instance_template:
            raise ConfigError(
                f"problem_instance_template must contain '{{number}}': {self.problem_instance_template!r}"
            )
        if not isinstance(self.expose_detail, bool):
            raise ConfigError(f"expose_detail must be a boolean, got {self.expose_detail!r}")

    @property
    def is_development(self) -> bool:
        return self.environment.lower() in ("dev", "development")

    @property
    def verbose_detail(self) -> bool:
        """Whether classifiers may put fault internals in responses."""
        return self.expose_detail or self.is_development

    def public_label(self, name: str) -> str:
        """Public label under which a handled fault type is logged."""
        return self.labels.get(name, name)

    def instance_uri(self, number: str) -> str:
        return self.problem_instance_template.format(number=number)

    # ------------------------------------------------------------------
    # Loading
    # ------------------------------------------------------------------

    @classmethod
    def load(
        cls,
        env_prefix: str = "APIFAULTS_",
        env_file: Optional[str] = None,
        overrides: Optional[dict[str, Any]] = None,
    ) -> "PipelineOptions":
        """
        Load options from a .env file, the environment and manual overrides.

        Variables are matched case-insensitively after the prefix, so
        ``APIFAULTS_EXPOSE_DETAIL=true`` sets ``expose_detail``.

        Args:
            env_prefix: Prefix for environment variables
            env_file: Path to .env file
            overrides: Manual overrides (highest precedence)

        Returns:
            Validated PipelineOptions
        """
        known = {f.name for f in fields(cls)}
        data: dict[str, Any] = {}

        if env_file:
            data.update(_collect(dotenv_values(env_file), env_prefix, known))
        data.update(_collect(os.environ, env_prefix, known))

        if overrides:
            unknown = set(overrides) - known
            if unknown:
                raise ConfigError(f"Unknown option(s): {', '.join(sorted(unknown))}")
            data.update(overrides)

        if "labels" in data:
            labels = dict(DEFAULT_LABELS)
            labels.update(_parse_labels(data["labels"]))
            data["labels"] = labels

        return cls(**data)


def _collect(source: Mapping[str, Optional[str]], prefix: str, known: set[str]) -> dict[str, Any]:
    result = {}
    for key, value in source.items():
        if value is None or not key.startswith(prefix):
            continue
        name = key[len(prefix):].lower()
        if name in known:
            result[name] = _parse_value(name, value)
    return result


def _parse_value(name: str, value: str) -> Any:
    """Parse string value to the type of the option."""
    if name == "expose_detail":
        lowered = value.strip().lower()
        if lowered in ("true", "yes", "1"):
            return True
        if lowered in ("false", "no", "0"):
            return False
        raise ConfigError(f"Invalid boolean for {name}: {value!r}")
    return value


def _parse_labels(value: Any) -> dict[str, str]:
    if isinstance(value, Mapping):
        return {str(k): str(v) for k, v in value.items()}
    try:
        parsed = json.loads(value)
    except (TypeError, ValueError) as e:
        raise ConfigError(f"labels must be a JSON object: {e}") from e
    if not isinstance(parsed, dict):
        raise ConfigError("labels must be a JSON object")
    return {str(k): str(v) for k, v in parsed.items()}
