"""
descriptor.py

Attribute Descriptors: per-attribute metadata and behavior.

A descriptor is one of two variants:
- StoredDescriptor: holds a value, optionally writable
- ComputedDescriptor: delegates reads to a getter and writes to a setter

Both carry `enumerable` (visible to iteration) and `configurable`
(may be redefined or removed).

Design Invariants:
- Immutable after creation; changes produce a new descriptor
- Validated at creation
- Shorthand declarations fail safe: every flag defaults to False
- A non-configurable descriptor may only narrow writable True -> False
"""

import math
from typing import Any, Callable, Dict, List, Mapping, Optional, Union

from attrchain.errors import (
    DefinitionError,
    InvalidAttributeNameError,
    NotConfigurableError,
)

Getter = Callable[[Any], Any]
Setter = Callable[[Any, Any], Any]

_STORED_KEYS = frozenset({"value", "writable"})
_COMPUTED_KEYS = frozenset({"get", "set"})
_FLAG_KEYS = frozenset({"enumerable", "configurable"})
_ALL_KEYS = _STORED_KEYS | _COMPUTED_KEYS | _FLAG_KEYS


# =============================================================================
# Helper Functions
# =============================================================================

def validate_name(name: Any) -> str:
    """
    Validate that an attribute name is a non-empty string.

    Raises:
        InvalidAttributeNameError: If name is invalid

    Returns:
        The validated name
    """
    if not isinstance(name, str) or not name:
        raise InvalidAttributeNameError(name)
    return name


def _validate_flag(value: Any, flag: str, name: Optional[str]) -> bool:
    if not isinstance(value, bool):
        raise DefinitionError(
            f"{flag} must be bool, got {type(value).__name__}", name
        )
    return value


_SCALAR_TYPES = (type(None), bool, int, float, complex, str, bytes)


def _is_immutable_scalar(value: Any) -> bool:
    if type(value) in _SCALAR_TYPES:
        return True
    if type(value) in (tuple, frozenset):
        return all(_is_immutable_scalar(item) for item in value)
    return False


def same_value(a: Any, b: Any) -> bool:
    """
    Compare two attribute values the way redefinition checks need.

    Identity always matches. Beyond that only immutable scalars (and tuples
    or frozensets of them) of the same type may match by equality. NaN
    matches NaN, while 0.0 and -0.0 differ. Any other object matches only
    itself, so an equal but distinct list is a different value.
    """
    if a is b:
        return True
    if type(a) is not type(b):
        return False
    if not (_is_immutable_scalar(a) and _is_immutable_scalar(b)):
        return False
    if isinstance(a, float):
        if math.isnan(a) or math.isnan(b):
            return math.isnan(a) and math.isnan(b)
        return a == b and math.copysign(1.0, a) == math.copysign(1.0, b)
    if isinstance(a, (tuple, frozenset)):
        if len(a) != len(b):
            return False
        if isinstance(a, tuple):
            return all(same_value(x, y) for x, y in zip(a, b))
    return a == b


# =============================================================================
# Descriptor Base
# =============================================================================

class Descriptor:
    """Common base for stored and computed descriptors."""

    __slots__ = ('_enumerable', '_configurable', '_frozen')

    kind = "abstract"

    def __setattr__(self, name: str, value: Any) -> None:
        if getattr(self, '_frozen', False):
            raise DefinitionError(
                f"descriptors are immutable; use replace() instead of setting '{name}'"
            )
        object.__setattr__(self, name, value)

    def __delattr__(self, name: str) -> None:
        raise DefinitionError(f"descriptors are immutable; cannot delete '{name}'")

    @property
    def enumerable(self) -> bool:
        return self._enumerable

    @property
    def configurable(self) -> bool:
        return self._configurable

    @property
    def is_stored(self) -> bool:
        return False

    @property
    def is_computed(self) -> bool:
        return False

    def fields(self) -> Dict[str, Any]:
        raise NotImplementedError

    def replace(self, **changes: Any) -> "Descriptor":
        """Return a copy of this descriptor with some fields changed."""
        values = self.fields()
        unknown = set(changes) - set(values)
        if unknown:
            raise DefinitionError(
                f"unknown {self.kind} descriptor field(s): {sorted(unknown)}"
            )
        values.update(changes)
        return type(self)._from_fields(values)

    @classmethod
    def _from_fields(cls, values: Dict[str, Any]) -> "Descriptor":
        raise NotImplementedError

    def changed_fields(self, other: "Descriptor") -> List[str]:
        """Names of fields that differ between self and other."""
        if type(self) is not type(other):
            return ["kind"]
        mine = self.fields()
        theirs = other.fields()
        changed = []
        for key, value in mine.items():
            if key in ("getter", "setter"):
                if value is not theirs[key]:
                    changed.append(key)
            elif not same_value(value, theirs[key]):
                changed.append(key)
        return changed

    def to_dict(self) -> Dict[str, Any]:
        raise NotImplementedError

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Descriptor):
            return NotImplemented
        return not self.changed_fields(other)

    __hash__ = None  # type: ignore[assignment]


# =============================================================================
# StoredDescriptor
# =============================================================================

class StoredDescriptor(Descriptor):
    """
    A data-holding attribute.

    Attributes:
        value: The stored value (any object)
        writable: Whether assignment may replace the value
        enumerable: Whether the attribute shows up in key iteration
        configurable: Whether the attribute may be redefined or removed
    """

    __slots__ = ('_value', '_writable')

    kind = "stored"

    def __init__(
        self,
        value: Any,
        *,
        writable: bool,
        enumerable: bool = False,
        configurable: bool = False,
    ):
        object.__setattr__(self, '_value', value)
        object.__setattr__(self, '_writable', _validate_flag(writable, "writable", None))
        object.__setattr__(self, '_enumerable', _validate_flag(enumerable, "enumerable", None))
        object.__setattr__(
            self, '_configurable', _validate_flag(configurable, "configurable", None)
        )
        object.__setattr__(self, '_frozen', True)

    @property
    def value(self) -> Any:
        return self._value

    @property
    def writable(self) -> bool:
        return self._writable

    @property
    def is_stored(self) -> bool:
        return True

    def fields(self) -> Dict[str, Any]:
        return {
            "value": self._value,
            "writable": self._writable,
            "enumerable": self._enumerable,
            "configurable": self._configurable,
        }

    @classmethod
    def _from_fields(cls, values: Dict[str, Any]) -> "StoredDescriptor":
        value = values.pop("value")
        return cls(value, **values)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "configurable": self._configurable,
            "enumerable": self._enumerable,
            "value": self._value,
            "writable": self._writable,
        }

    def __repr__(self) -> str:
        return (
            f"StoredDescriptor(value={self._value!r}, writable={self._writable}, "
            f"enumerable={self._enumerable}, configurable={self._configurable})"
        )


# =============================================================================
# ComputedDescriptor
# =============================================================================

class ComputedDescriptor(Descriptor):
    """
    An accessor attribute.

    The getter is called as ``getter(host)`` and the setter as
    ``setter(host, value)``, where ``host`` is the record that received the
    read or write, not necessarily the record that owns the descriptor.
    """

    __slots__ = ('_getter', '_setter')

    kind = "computed"

    def __init__(
        self,
        *,
        getter: Optional[Getter] = None,
        setter: Optional[Setter] = None,
        enumerable: bool = False,
        configurable: bool = False,
    ):
        if getter is None and setter is None:
            raise DefinitionError("computed descriptors need a getter, a setter, or both")
        if getter is not None and not callable(getter):
            raise DefinitionError(f"getter must be callable, got {type(getter).__name__}")
        if setter is not None and not callable(setter):
            raise DefinitionError(f"setter must be callable, got {type(setter).__name__}")

        object.__setattr__(self, '_getter', getter)
        object.__setattr__(self, '_setter', setter)
        object.__setattr__(self, '_enumerable', _validate_flag(enumerable, "enumerable", None))
        object.__setattr__(
            self, '_configurable', _validate_flag(configurable, "configurable", None)
        )
        object.__setattr__(self, '_frozen', True)

    @property
    def getter(self) -> Optional[Getter]:
        return self._getter

    @property
    def setter(self) -> Optional[Setter]:
        return self._setter

    @property
    def is_computed(self) -> bool:
        return True

    def fields(self) -> Dict[str, Any]:
        return {
            "getter": self._getter,
            "setter": self._setter,
            "enumerable": self._enumerable,
            "configurable": self._configurable,
        }

    @classmethod
    def _from_fields(cls, values: Dict[str, Any]) -> "ComputedDescriptor":
        return cls(**values)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "configurable": self._configurable,
            "enumerable": self._enumerable,
            "get": self._getter,
            "set": self._setter,
        }

    def __repr__(self) -> str:
        return (
            f"ComputedDescriptor(get={'yes' if self._getter else 'no'}, "
            f"set={'yes' if self._setter else 'no'}, "
            f"enumerable={self._enumerable}, configurable={self._configurable})"
        )


DescriptorSpec = Union[Descriptor, Mapping[str, Any]]


# =============================================================================
# Construction
# =============================================================================

def shorthand(value: Any) -> StoredDescriptor:
    """A value-only declaration: read-only, hidden and locked."""
    return StoredDescriptor(value, writable=False, enumerable=False, configurable=False)


def open_descriptor(value: Any) -> StoredDescriptor:
    """A stored descriptor with every flag True, as object literals produce."""
    return StoredDescriptor(value, writable=True, enumerable=True, configurable=True)


def from_dict(
    spec: Mapping[str, Any],
    name: Optional[str] = None,
    base: Optional[Descriptor] = None,
) -> Descriptor:
    """
    Build a descriptor from the mapping form.

    Keys: ``value``, ``writable``, ``get``, ``set``, ``enumerable``,
    ``configurable``. Omitted flags default to False, unless ``base`` (the
    attribute's current descriptor) is given, in which case omitted fields
    are taken from it.

    Raises:
        DefinitionError: On unknown keys, on mixing stored and computed
            keys, or when the descriptor kind cannot be determined
    """
    unknown = set(spec) - _ALL_KEYS
    if unknown:
        raise DefinitionError(f"unknown descriptor key(s): {sorted(unknown)}", name)

    has_stored = bool(_STORED_KEYS & set(spec))
    has_computed = bool(_COMPUTED_KEYS & set(spec))
    if has_stored and has_computed:
        raise DefinitionError(
            "cannot mix 'value'/'writable' with 'get'/'set'",
            name,
            suggestions=["Split into a stored attribute and a computed accessor"],
        )

    if has_stored:
        kind = StoredDescriptor
    elif has_computed:
        kind = ComputedDescriptor
    elif base is not None:
        kind = type(base)
    else:
        raise DefinitionError(
            "descriptor defines neither 'value' nor 'get'/'set'",
            name,
            suggestions=["Provide 'value' for a stored attribute or 'get'/'set' for an accessor"],
        )

    flags = {
        "enumerable": spec.get(
            "enumerable", base.enumerable if base is not None else False
        ),
        "configurable": spec.get(
            "configurable", base.configurable if base is not None else False
        ),
    }
    same_kind = base is not None and type(base) is kind

    try:
        if kind is StoredDescriptor:
            if "value" in spec:
                value = spec["value"]
            elif same_kind:
                value = base.value
            else:
                raise DefinitionError("stored descriptors must define 'value'", name)
            writable = spec.get("writable", base.writable if same_kind else False)
            return StoredDescriptor(value, writable=writable, **flags)

        getter = spec.get("get", base.getter if same_kind else None)
        setter = spec.get("set", base.setter if same_kind else None)
        return ComputedDescriptor(getter=getter, setter=setter, **flags)
    except DefinitionError as exc:
        if name is not None and exc.name is None:
            raise DefinitionError(
                exc.reason, name, suggestions=exc.suggestions, error_code=exc.error_code
            ) from exc
        raise


def to_descriptor(
    spec: DescriptorSpec,
    name: Optional[str] = None,
    base: Optional[Descriptor] = None,
) -> Descriptor:
    """Accept either a Descriptor instance or its mapping form."""
    if isinstance(spec, Descriptor):
        return spec
    if isinstance(spec, Mapping):
        return from_dict(spec, name=name, base=base)
    raise DefinitionError(
        f"expected a Descriptor or mapping, got {type(spec).__name__}",
        name,
        suggestions=["Wrap plain values with shorthand(value)"],
    )


# =============================================================================
# Redefinition Rules
# =============================================================================

def check_redefinition(
    name: str,
    old: Descriptor,
    new: Descriptor,
    record: Any = None,
) -> None:
    """
    Enforce the non-configurable invariant.

    A configurable descriptor may be replaced freely. A non-configurable one
    only accepts an identical descriptor or a stored descriptor whose only
    change is writable True -> False.

    Raises:
        NotConfigurableError: If the change is not permitted
    """
    if old.configurable:
        return

    changed = old.changed_fields(new)
    if not changed:
        return
    if changed == ["writable"] and old.writable and not new.writable:
        return

    raise NotConfigurableError(name, record, changed=changed)
