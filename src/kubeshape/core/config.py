#!/usr/bin/env python3
"""
KUBESHAPE SETTINGS
------------------
Codec settings: which fields the server manages (dropped from decoded
objects), which fields only become known after a write (forced to unknown),
the structured decoding mode and the nesting limit.

Settings may be loaded from a YAML file:

    ignore_fields: [status, metadata.resourceVersion]   # replaces defaults
    extra_ignore: ["metadata.annotations[\"kubectl.kubernetes.io/last-applied-configuration\"]"]
    unknown_fields: [metadata.uid]
    extra_unknown: [spec.clusterIP]
    complete: false
    max_depth: 256

Author: KubeShape Team
Date: 2026-01-16
"""

from collections.abc import Mapping, Sequence
from dataclasses import dataclass, replace
from pathlib import Path
from typing import Any, Tuple, Union

from ruamel.yaml import YAML, YAMLError

from kubeshape.codec.context import DEFAULT_MAX_DEPTH, DecodeContext
from kubeshape.core.errors import ConfigError, PathError
from kubeshape.core.paths import ExpressionSet

# Fields populated by the API server; they never round-trip from a manifest.
SERVER_SIDE_FIELDS: Tuple[str, ...] = (
    "metadata.creationTimestamp",
    "metadata.deletionGracePeriodSeconds",
    "metadata.deletionTimestamp",
    "metadata.finalizers",
    "metadata.generateName",
    "metadata.generation",
    "metadata.managedFields",
    "metadata.minReadySeconds",
    "metadata.ownerReferences",
    "metadata.paused",
    "metadata.resourceVersion",
    "metadata.selfLink",
    "status",
)

# Fields assigned by the server on creation.
CREATE_TIME_FIELDS: Tuple[str, ...] = (
    "metadata.uid",
)

KNOWN_KEYS = ("ignore_fields", "extra_ignore", "unknown_fields", "extra_unknown", "complete", "max_depth")


@dataclass(frozen=True)
class CodecSettings:
    ignore_fields: Tuple[str, ...] = SERVER_SIDE_FIELDS
    unknown_fields: Tuple[str, ...] = CREATE_TIME_FIELDS
    complete: bool = False
    max_depth: int = DEFAULT_MAX_DEPTH

    def __post_init__(self):
        # Validate expressions eagerly so a bad file fails at load time.
        try:
            self.ignore_set()
            self.unknown_set()
        except PathError as e:
            raise ConfigError(str(e)) from e

    def ignore_set(self) -> ExpressionSet:
        return ExpressionSet.from_strings(self.ignore_fields)

    def unknown_set(self) -> ExpressionSet:
        return ExpressionSet.from_strings(self.unknown_fields)

    def with_extra(self, ignore: Tuple[str, ...] = (), unknown: Tuple[str, ...] = ()) -> "CodecSettings":
        return replace(
            self,
            ignore_fields=self.ignore_fields + tuple(ignore),
            unknown_fields=self.unknown_fields + tuple(unknown),
        )

    def decode_context(self) -> DecodeContext:
        return DecodeContext(
            ignore=self.ignore_set(),
            unknown=self.unknown_set(),
            complete=self.complete,
            max_depth=self.max_depth,
        )


def load_settings(config_path: Union[str, Path]) -> CodecSettings:
    """Loads and validates a settings file. Unset keys keep their defaults."""
    path = Path(config_path)
    if not path.exists():
        raise ConfigError(f"Settings file not found: {path}")

    yaml = YAML(typ="safe")
    try:
        parsed = yaml.load(path.read_text(encoding="utf-8"))
    except YAMLError as e:
        raise ConfigError(f"Failed to parse settings file {path}: {e}") from e

    if parsed is None:
        parsed = {}
    if not isinstance(parsed, Mapping):
        raise ConfigError("Settings root must be a mapping.")

    unexpected = sorted(set(parsed) - set(KNOWN_KEYS))
    if unexpected:
        raise ConfigError(f"Unknown settings keys: {', '.join(map(str, unexpected))}")

    defaults = CodecSettings()
    ignore = _string_list(parsed.get("ignore_fields", defaults.ignore_fields), "ignore_fields")
    unknown = _string_list(parsed.get("unknown_fields", defaults.unknown_fields), "unknown_fields")
    ignore += _string_list(parsed.get("extra_ignore", ()), "extra_ignore")
    unknown += _string_list(parsed.get("extra_unknown", ()), "extra_unknown")

    complete = parsed.get("complete", defaults.complete)
    if not isinstance(complete, bool):
        raise ConfigError("complete must be a boolean.")

    max_depth = parsed.get("max_depth", defaults.max_depth)
    if isinstance(max_depth, bool) or not isinstance(max_depth, int) or max_depth <= 0:
        raise ConfigError("max_depth must be a positive integer.")

    return CodecSettings(
        ignore_fields=ignore,
        unknown_fields=unknown,
        complete=complete,
        max_depth=max_depth,
    )


def _string_list(value: Any, field_name: str) -> Tuple[str, ...]:
    if value is None:
        return ()
    if isinstance(value, str) or not isinstance(value, Sequence):
        raise ConfigError(f"{field_name} must be a list of path expressions.")
    for item in value:
        if not isinstance(item, str):
            raise ConfigError(f"{field_name} entries must be strings.")
    return tuple(value)
