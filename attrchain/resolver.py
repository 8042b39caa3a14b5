"""
resolver.py

Delegation Resolver: chained attribute lookup and assignment.

Lookup order: receiver -> receiver.delegate -> delegate's delegate -> ...

Reads return the first owner's stored value, or call its getter with the
receiver as host. Writes never touch a delegate's own attributes: they
either call an inherited setter with the receiver as host, or land on the
receiver itself (shadowing).
"""

import logging
from typing import Any, Iterator, List, Optional, Tuple

from attrchain.descriptor import Descriptor, open_descriptor, shorthand
from attrchain.errors import (
    CyclicDelegationError,
    NotExtensibleError,
    NotReadableError,
    NotWritableError,
)
from attrchain.extensibility import Extensibility

logger = logging.getLogger(__name__)


# =============================================================================
# ABSENT Marker
# =============================================================================

class _AbsentType:
    """Result of a lookup that found no owner. Distinct from a stored None."""

    __slots__ = ()
    _instance = None

    def __new__(cls):
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __bool__(self) -> bool:
        return False

    def __repr__(self) -> str:
        return "ABSENT"

    def __reduce__(self):
        return (_AbsentType, ())


ABSENT = _AbsentType()


# =============================================================================
# Chain Traversal
# =============================================================================

def _label(record: Any) -> str:
    return record.label or f"<record {id(record):#x}>"


def iter_chain(record: Any, max_depth: Optional[int] = None) -> Iterator[Any]:
    """
    Yield the receiver and each delegate in order.

    Traversal stops at the first record without a delegate. Revisiting a
    record, or visiting more than `max_depth` records, raises.

    Raises:
        CyclicDelegationError: On a cycle or when the depth bound is exceeded
    """
    if max_depth is None:
        max_depth = record.config.max_chain_depth

    visited = set()
    path: List[str] = []
    current = record
    while current is not None:
        if id(current) in visited:
            path.append(_label(current))
            raise CyclicDelegationError(path)
        if len(path) >= max_depth:
            path.append(_label(current))
            raise CyclicDelegationError(path, max_depth=max_depth)
        visited.add(id(current))
        path.append(_label(current))
        yield current
        current = current.delegate


def find_owner(record: Any, name: str) -> Optional[Tuple[Any, Descriptor]]:
    """Return (owner, descriptor) for the first record owning `name`, or None."""
    for candidate in iter_chain(record):
        descriptor = candidate._attributes.get(name)
        if descriptor is not None:
            return candidate, descriptor
    return None


# =============================================================================
# Read / Write
# =============================================================================

def resolve_get(record: Any, name: str) -> Any:
    """
    Read `name` as seen from `record`.

    Returns:
        The value, or ABSENT if no record in the chain owns `name`

    Raises:
        NotReadableError: If the owner is a computed attribute with no getter
        CyclicDelegationError: If the chain is cyclic
    """
    found = find_owner(record, name)
    if found is None:
        return ABSENT

    owner, descriptor = found
    if descriptor.is_stored:
        return descriptor.value
    if descriptor.getter is None:
        raise NotReadableError(name, owner)
    return descriptor.getter(record)


def resolve_set(record: Any, name: str, value: Any, strict: Optional[bool] = None) -> bool:
    """
    Assign `name` on `record`.

    Args:
        record: The receiver
        name: Attribute name
        value: New value
        strict: Overrides the receiver's config; when False, writes to
            read-only stored attributes and additions to non-extensible
            records are ignored instead of raising

    Returns:
        True if a value was written or a setter was called, False if the
        write was ignored in non-strict mode

    Raises:
        NotWritableError: Computed owner without a setter, or a read-only
            stored owner in strict mode
        NotExtensibleError: New attribute on a locked receiver in strict mode
        CyclicDelegationError: If the chain is cyclic
    """
    config = record.config
    if strict is None:
        strict = config.strict

    found = find_owner(record, name)
    if found is not None:
        owner, descriptor = found
        if descriptor.is_computed:
            if descriptor.setter is None:
                raise NotWritableError(name, owner, "attribute has a getter but no setter")
            descriptor.setter(record, value)
            return True

        if not descriptor.writable:
            if strict:
                raise NotWritableError(name, owner)
            logger.debug("ignored write to read-only %r on %r", name, owner)
            return False

        if owner is record:
            record._attributes[name] = descriptor.replace(value=value)
            return True

    if record._extensibility is not Extensibility.EXTENSIBLE:
        if strict:
            raise NotExtensibleError(name, record)
        logger.debug("ignored new attribute %r on non-extensible %r", name, record)
        return False

    make = open_descriptor if config.open_assignment else shorthand
    record._attributes[name] = make(value)
    return True
