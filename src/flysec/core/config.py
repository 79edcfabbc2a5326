# Copyright 2026 Firefly Software Solutions Inc.
#
# Licensed under the Apache License, Version 2.0 (the "License");
# you may not use this file except in compliance with the License.
# You may obtain a copy of the License at
#
#     http://www.apache.org/licenses/LICENSE-2.0
#
# Unless required by applicable law or agreed to in writing, software
# distributed under the License is distributed on an "AS IS" BASIS,
# WITHOUT WARRANTIES OR CONDITIONS OF ANY KIND, either express or implied.
# See the License for the specific language governing permissions and
# limitations under the License.
"""Security configuration sources: YAML/TOML files, env vars, and dataclass binding."""

from __future__ import annotations

import dataclasses
import importlib.resources
import os
import re
import tomllib
from collections.abc import Callable
from pathlib import Path
from typing import Any, TypeVar, cast, get_type_hints

import yaml  # type: ignore[import-untyped]
from pydantic import BaseModel, ValidationError

from flysec.kernel.exceptions import ConfigurationException

T = TypeVar("T")

_PLACEHOLDER_RE = re.compile(r"\$\{([^}]+)\}")

_CONFIG_PROPERTIES_ATTR = "__flysec_config_prefix__"


def config_properties(prefix: str) -> Callable[[type[T]], type[T]]:
    """Mark a class as bindable to a configuration prefix.

    Works with both dataclasses and Pydantic BaseModel subclasses.

    Usage:
        @config_properties(prefix="flysec.security.session")
        @dataclass
        class SessionProperties:
            cookie_name: str = "FLYSEC_SESSION"
    """

    def decorator(cls: type[T]) -> type[T]:
        setattr(cls, _CONFIG_PROPERTIES_ATTR, prefix)
        return cls

    return decorator


class Config:
    """Hierarchical configuration with dot-notation access and env var overrides.

    Priority (highest wins):
    1. Environment variables (FLYSEC_SECTION_KEY format)
    2. Configuration dict / YAML file values
    3. Dataclass defaults
    """

    def __init__(self, data: dict[str, Any] | None = None) -> None:
        self._data: dict[str, Any] = data or {}
        self._loaded_sources: list[str] = []

    @property
    def loaded_sources(self) -> list[str]:
        """List of config file paths that were loaded, in merge order."""
        return list(self._loaded_sources)

    def to_dict(self) -> dict[str, Any]:
        """Return a shallow copy of the raw configuration data."""
        return dict(self._data)

    @classmethod
    def from_sources(
        cls,
        base_dir: str | Path,
        active_profiles: list[str] | None = None,
        load_defaults: bool = True,
    ) -> Config:
        """Load and merge config from multiple sources.

        Merge order (later wins):
        1. Library defaults (flysec-defaults.yaml from the package)
        2. config/flysec.yaml or config/flysec.toml
        3. flysec.yaml or flysec.toml (project root)
        4. Profile overlays: config/flysec-{profile}.yaml, flysec-{profile}.yaml
        5. Environment variables (handled at read time in get())
        """
        base_dir = Path(base_dir)
        data: dict[str, Any] = {}
        sources: list[str] = []

        if load_defaults:
            data = cls._load_library_defaults()
            sources.append("flysec-defaults.yaml (library defaults)")

        candidates = [base_dir / "config" / "flysec", base_dir / "flysec"]
        for profile in active_profiles or []:
            candidates += [base_dir / "config" / f"flysec-{profile}", base_dir / f"flysec-{profile}"]

        for stem in candidates:
            for ext in (".yaml", ".toml"):
                candidate = stem.with_suffix(ext)
                if candidate.is_file():
                    data = cls._deep_merge(data, cls._load_config_data(candidate))
                    sources.append(str(candidate))

        instance = cls(data)
        instance._loaded_sources = sources
        return instance

    @classmethod
    def from_file(cls, path: str | Path, load_defaults: bool = True) -> Config:
        """Load configuration from a single YAML or TOML file."""
        path = Path(path)
        data: dict[str, Any] = cls._load_library_defaults() if load_defaults else {}
        sources = ["flysec-defaults.yaml (library defaults)"] if load_defaults else []

        if path.exists():
            data = cls._deep_merge(data, cls._load_config_data(path))
            sources.append(str(path))

        instance = cls(data)
        instance._loaded_sources = sources
        return instance

    @staticmethod
    def _load_config_data(path: Path) -> dict[str, Any]:
        """Load config data from a YAML or TOML file."""
        if path.suffix == ".toml":
            with open(path, "rb") as f:
                return tomllib.load(f) or {}
        with open(path) as f:
            return yaml.safe_load(f) or {}

    @staticmethod
    def _load_library_defaults() -> dict[str, Any]:
        """Load built-in defaults from flysec.resources."""
        defaults_file = importlib.resources.files("flysec.resources").joinpath("flysec-defaults.yaml")
        with importlib.resources.as_file(defaults_file) as p, open(p) as f:
            return yaml.safe_load(f) or {}

    @staticmethod
    def _deep_merge(base: dict[str, Any], override: dict[str, Any]) -> dict[str, Any]:
        """Recursively merge override into base, with override values winning."""
        merged = dict(base)
        for key, value in override.items():
            if key in merged and isinstance(merged[key], dict) and isinstance(value, dict):
                merged[key] = Config._deep_merge(merged[key], value)
            else:
                merged[key] = value
        return merged

    def get(self, key: str, default: Any = None) -> Any:
        """Get a value by dot-notation key, checking env vars first.

        String values containing ``${...}`` placeholders are resolved:
        - ``${ENV_VAR}``: resolved from environment variables
        - ``${config.key}``: resolved from other config values
        - ``${key:default}``: uses default if key/env not found
        """
        # flysec.security.csrf.cookie-name -> FLYSEC_SECURITY_CSRF_COOKIE_NAME
        env_base = key.removeprefix("flysec.")
        env_key = "FLYSEC_" + env_base.upper().replace(".", "_").replace("-", "_")
        env_val = os.environ.get(env_key)
        if env_val is not None:
            return env_val

        current: Any = self._data
        for part in key.split("."):
            if isinstance(current, dict):
                current = current.get(part)
                if current is None:
                    return default
            else:
                return default

        if isinstance(current, str) and "${" in current:
            return self._resolve_placeholders(current)

        return current

    def _resolve_placeholders(self, value: str, _depth: int = 0) -> str:
        """Resolve ``${...}`` placeholders in a string value."""
        if _depth > 10:
            raise ConfigurationException(
                f"Max recursion depth exceeded resolving placeholders in '{value}'. Check for circular references.",
                code="PLACEHOLDER_CYCLE",
            )

        def _replace(match: re.Match[str]) -> str:
            inner = match.group(1)
            if ":" in inner:
                ref_key, default_val = inner.split(":", 1)
            else:
                ref_key, default_val = inner, None

            env_val = os.environ.get(ref_key)
            if env_val is not None:
                return env_val

            current: Any = self._data
            for part in ref_key.split("."):
                if isinstance(current, dict):
                    current = current.get(part)
                    if current is None:
                        break
                else:
                    current = None
                    break

            if current is not None:
                resolved = str(current)
                if "${" in resolved:
                    resolved = self._resolve_placeholders(resolved, _depth + 1)
                return resolved

            if default_val is not None:
                return cast(str, default_val)

            raise ConfigurationException(
                f"Cannot resolve placeholder '${{{inner}}}': not found in environment or config",
                code="UNRESOLVED_PLACEHOLDER",
            )

        return _PLACEHOLDER_RE.sub(_replace, value)

    def get_section(self, prefix: str) -> dict[str, Any]:
        """Get all values under a prefix as a dict."""
        current: Any = self._data
        for part in prefix.split("."):
            if isinstance(current, dict):
                current = current.get(part, {})
            else:
                return {}
        return current if isinstance(current, dict) else {}

    def bind(self, config_cls: type[T]) -> T:
        """Bind configuration to a @config_properties dataclass or Pydantic model.

        Keys are matched with dashes normalised to underscores, so
        ``cookie-name`` in YAML binds to a ``cookie_name`` field.
        """
        prefix = getattr(config_cls, _CONFIG_PROPERTIES_ATTR, None)
        if prefix is None:
            raise ConfigurationException(f"{config_cls.__name__} is not decorated with @config_properties")

        section = {str(k).replace("-", "_"): v for k, v in self.get_section(prefix).items()}

        if isinstance(config_cls, type) and issubclass(config_cls, BaseModel):
            try:
                return config_cls.model_validate(section)
            except ValidationError as exc:
                raise ConfigurationException(
                    f"Configuration validation failed for '{config_cls.__name__}' (prefix='{prefix}'):\n{exc}"
                ) from exc

        hints = get_type_hints(config_cls)
        kwargs: dict[str, Any] = {}
        for field in dataclasses.fields(config_cls):  # type: ignore[arg-type]
            if field.name in section:
                value = section[field.name]
                expected_type = hints.get(field.name)
                if expected_type is int and isinstance(value, str):
                    value = int(value)
                elif expected_type is float and isinstance(value, str):
                    value = float(value)
                elif expected_type is bool and isinstance(value, str):
                    value = value.lower() in ("true", "1", "yes")
                kwargs[field.name] = value

        return config_cls(**kwargs)
