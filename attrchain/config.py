"""
config.py

Engine configuration for attrchain.

An EngineConfig is captured by every ObjectRecord at creation and controls
the safety limit on delegation traversal and the assignment policy.
"""

import os
from typing import Any, Dict, Mapping, Optional

from attrchain.errors import ConfigurationError

DEFAULT_MAX_CHAIN_DEPTH = 256

_ENV_PREFIX = "ATTRCHAIN_"
_TRUE_STRINGS = frozenset({"1", "true", "yes", "on"})
_FALSE_STRINGS = frozenset({"0", "false", "no", "off"})


def _parse_bool(field_name: str, raw: str) -> bool:
    lowered = raw.strip().lower()
    if lowered in _TRUE_STRINGS:
        return True
    if lowered in _FALSE_STRINGS:
        return False
    raise ConfigurationError(field_name, f"expected a boolean string, got {raw!r}")


class EngineConfig:
    """
    Immutable engine settings.

    Attributes:
        max_chain_depth: Maximum number of records visited by one lookup
            before the chain is reported as cyclic (must be >= 1)
        strict: When True, writes to read-only stored attributes and
            additions to non-extensible records raise; when False they are
            ignored and the write reports False
        open_assignment: When True, attributes created by assignment are
            writable, enumerable and configurable; otherwise they get the
            shorthand flags (all False)
    """

    __slots__ = ('_max_chain_depth', '_strict', '_open_assignment', '_frozen')

    def __init__(
        self,
        *,
        max_chain_depth: int = DEFAULT_MAX_CHAIN_DEPTH,
        strict: bool = True,
        open_assignment: bool = False,
    ):
        if isinstance(max_chain_depth, bool) or not isinstance(max_chain_depth, int):
            raise ConfigurationError(
                "max_chain_depth",
                f"must be int, got {type(max_chain_depth).__name__}",
            )
        if max_chain_depth < 1:
            raise ConfigurationError("max_chain_depth", "must be at least 1")
        if not isinstance(strict, bool):
            raise ConfigurationError("strict", f"must be bool, got {type(strict).__name__}")
        if not isinstance(open_assignment, bool):
            raise ConfigurationError(
                "open_assignment",
                f"must be bool, got {type(open_assignment).__name__}",
            )

        object.__setattr__(self, '_max_chain_depth', max_chain_depth)
        object.__setattr__(self, '_strict', strict)
        object.__setattr__(self, '_open_assignment', open_assignment)
        object.__setattr__(self, '_frozen', True)

    def __setattr__(self, name: str, value: Any) -> None:
        if getattr(self, '_frozen', False):
            raise ConfigurationError(name, "EngineConfig is immutable after creation")
        object.__setattr__(self, name, value)

    @property
    def max_chain_depth(self) -> int:
        return self._max_chain_depth

    @property
    def strict(self) -> bool:
        return self._strict

    @property
    def open_assignment(self) -> bool:
        return self._open_assignment

    def replace(self, **changes: Any) -> "EngineConfig":
        """Return a new EngineConfig with the given fields changed."""
        values = self.to_dict()
        unknown = set(changes) - set(values)
        if unknown:
            raise ConfigurationError(sorted(unknown)[0], "unknown configuration field")
        values.update(changes)
        return EngineConfig(**values)

    # -------------------------------------------------------------------------
    # Serialization
    # -------------------------------------------------------------------------

    def to_dict(self) -> Dict[str, Any]:
        return {
            "max_chain_depth": self._max_chain_depth,
            "open_assignment": self._open_assignment,
            "strict": self._strict,
        }

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "EngineConfig":
        """Construct from a mapping; missing fields keep their defaults."""
        unknown = set(data) - {"max_chain_depth", "strict", "open_assignment"}
        if unknown:
            raise ConfigurationError(sorted(unknown)[0], "unknown configuration field")
        return cls(**dict(data))

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None) -> "EngineConfig":
        """
        Build a config from ATTRCHAIN_* environment variables.

        Recognised variables:
            ATTRCHAIN_MAX_CHAIN_DEPTH, ATTRCHAIN_STRICT, ATTRCHAIN_OPEN_ASSIGNMENT
        """
        env = os.environ if environ is None else environ
        values: Dict[str, Any] = {}

        raw_depth = env.get(f"{_ENV_PREFIX}MAX_CHAIN_DEPTH")
        if raw_depth is not None:
            try:
                values["max_chain_depth"] = int(raw_depth)
            except ValueError:
                raise ConfigurationError(
                    "max_chain_depth", f"expected an integer, got {raw_depth!r}"
                )

        for field_name in ("strict", "open_assignment"):
            raw = env.get(f"{_ENV_PREFIX}{field_name.upper()}")
            if raw is not None:
                values[field_name] = _parse_bool(field_name, raw)

        return cls(**values)

    # -------------------------------------------------------------------------
    # Comparison
    # -------------------------------------------------------------------------

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, EngineConfig):
            return NotImplemented
        return self.to_dict() == other.to_dict()

    def __hash__(self) -> int:
        return hash((self._max_chain_depth, self._strict, self._open_assignment))

    def __repr__(self) -> str:
        return (
            f"EngineConfig(max_chain_depth={self._max_chain_depth}, "
            f"strict={self._strict}, open_assignment={self._open_assignment})"
        )


# =============================================================================
# Process Default
# =============================================================================

_default_config = EngineConfig()


def get_default_config() -> EngineConfig:
    """Return the config used by records created without an explicit one."""
    return _default_config


def set_default_config(config: EngineConfig) -> EngineConfig:
    """
    Replace the process default config.

    Returns the previous default so callers can restore it.
    Records already created keep the config they captured.
    """
    global _default_config
    if not isinstance(config, EngineConfig):
        raise ConfigurationError(
            "config", f"must be EngineConfig, got {type(config).__name__}"
        )
    previous = _default_config
    _default_config = config
    return previous
