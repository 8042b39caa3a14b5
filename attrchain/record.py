"""
record.py

ObjectRecord: a named collection of attribute descriptors plus a
delegation link.

Design:
- The record exclusively owns its descriptor map (insertion ordered)
- The delegate is held through a weak reference and never extends its
  lifetime; a collected delegate ends the chain
- Reads and writes go through the resolver; definitions and removals go
  through the descriptor rules and the record's lock state

Example:
    base = ObjectRecord.literal({"greeting": "hello"}, label="base")
    child = ObjectRecord(delegate=base, label="child")

    child.get("greeting")          # "hello", found on the delegate
    child.set("greeting", "hi")    # shadows on child
    base.get("greeting")           # still "hello"
"""

import logging
import weakref
from typing import Any, Dict, Iterator, List, Mapping, Optional

from attrchain import extensibility as _locks
from attrchain.config import EngineConfig, get_default_config
from attrchain.descriptor import (
    Descriptor,
    DescriptorSpec,
    check_redefinition,
    open_descriptor,
    to_descriptor,
    validate_name,
)
from attrchain.errors import (
    AttributeNotFoundError,
    DefinitionError,
    NotCallableError,
    NotConfigurableError,
    NotExtensibleError,
    SealedError,
)
from attrchain.extensibility import Extensibility
from attrchain.resolver import ABSENT, iter_chain, resolve_get, resolve_set

logger = logging.getLogger(__name__)


# =============================================================================
# OwnKeys: lazy, restartable view of own attribute names
# =============================================================================

class OwnKeys:
    """
    Own attribute names of a record in declaration order.

    Each iteration starts over and reads the record as it is at that
    moment. Names removed mid-iteration are skipped.
    """

    __slots__ = ('_record', '_enumerable_only')

    def __init__(self, record: "ObjectRecord", enumerable_only: bool = False):
        self._record = record
        self._enumerable_only = enumerable_only

    def __iter__(self) -> Iterator[str]:
        attributes = self._record._attributes
        for name in tuple(attributes):
            descriptor = attributes.get(name)
            if descriptor is None:
                continue
            if self._enumerable_only and not descriptor.enumerable:
                continue
            yield name

    def __contains__(self, name: object) -> bool:
        descriptor = self._record._attributes.get(name)  # type: ignore[arg-type]
        if descriptor is None:
            return False
        return descriptor.enumerable or not self._enumerable_only

    def __len__(self) -> int:
        return sum(1 for _ in self)

    def __repr__(self) -> str:
        return f"OwnKeys({list(self)!r})"


# =============================================================================
# ObjectRecord
# =============================================================================

class ObjectRecord:
    """
    A mutable object made of attribute descriptors.

    Attributes:
        label: Optional name used in diagnostics
        delegate: Next record in the lookup chain, or None
        extensibility: Current lock state
        config: EngineConfig captured at creation
    """

    __slots__ = ('_attributes', '_delegate_ref', '_extensibility', '_config', '_label', '__weakref__')

    def __init__(
        self,
        delegate: Optional["ObjectRecord"] = None,
        *,
        label: Optional[str] = None,
        config: Optional[EngineConfig] = None,
    ):
        if config is not None and not isinstance(config, EngineConfig):
            raise DefinitionError(
                f"config must be EngineConfig or None, got {type(config).__name__}"
            )
        if label is not None and not isinstance(label, str):
            raise DefinitionError(f"label must be str or None, got {type(label).__name__}")

        self._attributes: Dict[str, Descriptor] = {}
        self._delegate_ref = None
        self._extensibility = Extensibility.EXTENSIBLE
        self._config = config if config is not None else get_default_config()
        self._label = label
        if delegate is not None:
            self._delegate_ref = weakref.ref(_check_record(delegate, "delegate"))

    # =========================================================================
    # Factory Methods
    # =========================================================================

    @classmethod
    def create(
        cls,
        delegate: Optional["ObjectRecord"] = None,
        attributes: Optional[Mapping[str, DescriptorSpec]] = None,
        *,
        label: Optional[str] = None,
        config: Optional[EngineConfig] = None,
    ) -> "ObjectRecord":
        """
        Create a record with a delegate and an initial set of descriptors.

        Args:
            delegate: Record to delegate lookups to
            attributes: name -> Descriptor (or mapping form)
        """
        record = cls(delegate, label=label, config=config)
        if attributes:
            record.define_many(attributes)
        return record

    @classmethod
    def literal(
        cls,
        values: Optional[Mapping[str, Any]] = None,
        *,
        delegate: Optional["ObjectRecord"] = None,
        label: Optional[str] = None,
        config: Optional[EngineConfig] = None,
    ) -> "ObjectRecord":
        """
        Create a record the way an object literal would.

        Every attribute is stored, writable, enumerable and configurable.
        """
        record = cls(delegate, label=label, config=config)
        for name, value in (values or {}).items():
            record._attributes[validate_name(name)] = open_descriptor(value)
        return record

    # =========================================================================
    # Properties
    # =========================================================================

    @property
    def label(self) -> Optional[str]:
        return self._label

    @property
    def config(self) -> EngineConfig:
        return self._config

    @property
    def extensibility(self) -> Extensibility:
        return self._extensibility

    @property
    def delegate(self) -> Optional["ObjectRecord"]:
        """The next record in the chain; None if unset or collected."""
        if self._delegate_ref is None:
            return None
        return self._delegate_ref()

    def set_delegate(self, delegate: Optional["ObjectRecord"]) -> None:
        """
        Replace the delegation link.

        Cycles are not checked here; lookups detect them.

        Raises:
            NotExtensibleError: If the record is sealed or frozen
        """
        if delegate is not None:
            _check_record(delegate, "delegate")
        if delegate is self.delegate:
            return
        if self._extensibility is not Extensibility.EXTENSIBLE:
            raise NotExtensibleError("<delegate>", self)
        self._delegate_ref = weakref.ref(delegate) if delegate is not None else None
        logger.debug("%r: delegate set to %r", self, delegate)

    # =========================================================================
    # Definition
    # =========================================================================

    def define(self, name: str, descriptor: DescriptorSpec) -> "ObjectRecord":
        """
        Insert or replace the descriptor for `name`.

        Mapping-form descriptors for an existing attribute are merged with
        the current descriptor; for a new attribute omitted flags are False.

        Raises:
            DefinitionError: If the descriptor is malformed
            NotExtensibleError: If `name` is new and the record is locked
            NotConfigurableError: If the existing attribute is not
                configurable and the change is not writable True -> False
        """
        validate_name(name)
        existing = self._attributes.get(name)
        new = to_descriptor(descriptor, name=name, base=existing)

        if existing is None:
            if self._extensibility is not Extensibility.EXTENSIBLE:
                raise NotExtensibleError(name, self)
        else:
            check_redefinition(name, existing, new, self)

        self._attributes[name] = new
        return self

    def define_many(self, descriptors: Mapping[str, DescriptorSpec]) -> "ObjectRecord":
        """
        Define several attributes.

        All descriptors are validated before any is applied; application
        then stops at the first failure.
        """
        prepared = []
        for name, spec in descriptors.items():
            validate_name(name)
            prepared.append(
                (name, to_descriptor(spec, name=name, base=self._attributes.get(name)))
            )
        for name, descriptor in prepared:
            self.define(name, descriptor)
        return self

    def remove(self, name: str) -> bool:
        """
        Remove an own attribute.

        Returns:
            True if removed, False if `name` was not an own attribute

        Raises:
            NotConfigurableError: If the attribute is not configurable
            SealedError: If the record is sealed or frozen
        """
        validate_name(name)
        descriptor = self._attributes.get(name)
        if descriptor is None:
            return False
        if not descriptor.configurable:
            raise NotConfigurableError(name, self, operation="remove")
        if self._extensibility is not Extensibility.EXTENSIBLE:
            raise SealedError(name, self)
        del self._attributes[name]
        return True

    # =========================================================================
    # Access
    # =========================================================================

    def get(self, name: str, default: Any = ABSENT) -> Any:
        """
        Read `name` through the delegation chain.

        Returns:
            The value, or `default` (ABSENT unless given) if no record in
            the chain owns `name`
        """
        validate_name(name)
        value = resolve_get(self, name)
        if value is ABSENT:
            return default
        return value

    def get_strict(self, name: str) -> Any:
        """
        Read `name`, raising if no record in the chain owns it.

        Raises:
            AttributeNotFoundError: If `name` is absent
        """
        validate_name(name)
        value = resolve_get(self, name)
        if value is ABSENT:
            raise AttributeNotFoundError(name, self)
        return value

    def set(self, name: str, value: Any, *, strict: Optional[bool] = None) -> bool:
        """
        Assign `name` with this record as receiver.

        Returns:
            True if applied, False if ignored in non-strict mode
        """
        validate_name(name)
        return resolve_set(self, name, value, strict)

    def call(self, name: str, *args: Any, **kwargs: Any) -> Any:
        """
        Resolve `name` and call it with this record as the first argument.

        Raises:
            AttributeNotFoundError: If `name` is absent
            NotCallableError: If the resolved value is not callable
        """
        func = self.get_strict(name)
        if not callable(func):
            raise NotCallableError(name, func, self)
        return func(self, *args, **kwargs)

    # =========================================================================
    # Introspection
    # =========================================================================

    def has_own(self, name: str) -> bool:
        """True iff `name` is defined directly on this record."""
        validate_name(name)
        return name in self._attributes

    def has(self, name: str) -> bool:
        """True if any record in the chain owns `name`."""
        validate_name(name)
        return any(name in record._attributes for record in iter_chain(self))

    def own_keys(self, enumerable_only: bool = False) -> OwnKeys:
        """Own attribute names in declaration order."""
        return OwnKeys(self, enumerable_only)

    def get_own_descriptor(self, name: str) -> Optional[Descriptor]:
        """The descriptor defined on this record for `name`, or None."""
        validate_name(name)
        return self._attributes.get(name)

    def property_is_enumerable(self, name: str) -> bool:
        descriptor = self.get_own_descriptor(name)
        return descriptor is not None and descriptor.enumerable

    def is_delegate_of(self, other: "ObjectRecord") -> bool:
        """True if this record appears in `other`'s chain (excluding `other`)."""
        _check_record(other, "other")
        return any(record is self for record in iter_chain(other) if record is not other)

    def chain(self) -> List["ObjectRecord"]:
        """The delegation chain, receiver first."""
        return list(iter_chain(self))

    def describe(self) -> Dict[str, Dict[str, Any]]:
        """Own descriptors in their mapping form, in declaration order."""
        return {name: d.to_dict() for name, d in self._attributes.items()}

    def to_dict(self) -> Dict[str, Any]:
        """
        Snapshot of own enumerable attributes.

        Computed attributes are read through their getter with this record
        as host; write-only ones are left out.
        """
        result = {}
        for name in self.own_keys(enumerable_only=True):
            descriptor = self._attributes[name]
            if descriptor.is_computed and descriptor.getter is None:
                continue
            result[name] = resolve_get(self, name)
        return result

    # =========================================================================
    # Locking
    # =========================================================================

    def prevent_extensions(self) -> "ObjectRecord":
        return _locks.prevent_extensions(self)

    def seal(self) -> "ObjectRecord":
        return _locks.seal(self)

    def freeze(self) -> "ObjectRecord":
        return _locks.freeze(self)

    @property
    def is_extensible(self) -> bool:
        return _locks.is_extensible(self)

    @property
    def is_sealed(self) -> bool:
        return _locks.is_sealed(self)

    @property
    def is_frozen(self) -> bool:
        return _locks.is_frozen(self)

    # =========================================================================
    # Python Protocols
    # =========================================================================

    def __contains__(self, name: object) -> bool:
        if not isinstance(name, str) or not name:
            return False
        return self.has(name)

    def __iter__(self) -> Iterator[str]:
        """Iterate over own enumerable names."""
        return iter(self.own_keys(enumerable_only=True))

    def __len__(self) -> int:
        """Number of own attributes, enumerable or not."""
        return len(self._attributes)

    def __repr__(self) -> str:
        name = self._label or f"{id(self):#x}"
        return f"ObjectRecord({name}, attrs={len(self._attributes)}, {self._extensibility.value})"

    def __str__(self) -> str:
        lines = [f"{self._label or 'ObjectRecord'} ({self._extensibility.value}):"]
        for name, descriptor in self._attributes.items():
            marker = "*" if descriptor.enumerable else " "
            if descriptor.is_stored:
                flag = "rw" if descriptor.writable else "r-"
                lines.append(f"  {marker} {name}: {descriptor.value!r} [{flag}]")
            else:
                lines.append(f"  {marker} {name}: <computed>")
        delegate = self.delegate
        if delegate is not None:
            lines.append(f"  -> {delegate!r}")
        return "\n".join(lines)


def _check_record(value: Any, field_name: str) -> ObjectRecord:
    if not isinstance(value, ObjectRecord):
        raise DefinitionError(
            f"{field_name} must be ObjectRecord or None, got {type(value).__name__}"
        )
    return value
