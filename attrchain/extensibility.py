"""
extensibility.py

Extensibility Controller: the three-level lock on an ObjectRecord.

    EXTENSIBLE -> SEALED -> FROZEN

- EXTENSIBLE: attributes may be added and removed
- SEALED: no additions or removals; writable stored attributes and
  setters still work
- FROZEN: as SEALED, and every stored attribute is read-only; getters and
  setters on computed attributes remain callable

Transitions only tighten. They touch the record's own descriptors and
never the descriptors of its delegates, so behavior reached through the
delegation chain can still change after a record is locked.
"""

import logging
from enum import Enum

logger = logging.getLogger(__name__)


class Extensibility(Enum):
    """Lock state of a record, ordered from loosest to tightest."""
    EXTENSIBLE = "extensible"
    SEALED = "sealed"
    FROZEN = "frozen"

    @property
    def rank(self) -> int:
        return _RANKS[self]

    def at_least(self, other: "Extensibility") -> bool:
        """True if this state is as tight as `other` or tighter."""
        return self.rank >= other.rank


_RANKS = {
    Extensibility.EXTENSIBLE: 0,
    Extensibility.SEALED: 1,
    Extensibility.FROZEN: 2,
}


def _tighten(record, target: Extensibility) -> None:
    current = record._extensibility
    if target.rank > current.rank:
        record._extensibility = target
        logger.debug("%r: %s -> %s", record, current.value, target.value)


def prevent_extensions(record):
    """
    Forbid new attributes.

    Moves EXTENSIBLE to SEALED without touching descriptor flags. Removal
    is refused from then on as well, since both restrictions share one
    lattice.
    """
    _tighten(record, Extensibility.SEALED)
    return record


def seal(record):
    """
    Seal a record: no additions, no removals, no redefinitions.

    Every own descriptor becomes non-configurable. Idempotent; a frozen
    record stays frozen.
    """
    attributes = record._attributes
    for name, descriptor in list(attributes.items()):
        if descriptor.configurable:
            attributes[name] = descriptor.replace(configurable=False)
    _tighten(record, Extensibility.SEALED)
    return record


def freeze(record):
    """
    Freeze a record: sealed, and every own stored attribute read-only.

    Computed attributes keep their getter and setter.
    """
    attributes = record._attributes
    for name, descriptor in list(attributes.items()):
        if descriptor.is_stored and descriptor.writable:
            attributes[name] = descriptor.replace(writable=False, configurable=False)
        elif descriptor.configurable:
            attributes[name] = descriptor.replace(configurable=False)
    _tighten(record, Extensibility.FROZEN)
    return record


def is_extensible(record) -> bool:
    return record._extensibility is Extensibility.EXTENSIBLE


def is_sealed(record) -> bool:
    return record._extensibility.at_least(Extensibility.SEALED)


def is_frozen(record) -> bool:
    return record._extensibility is Extensibility.FROZEN
