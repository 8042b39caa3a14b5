"""
construct.py

Instantiation Guard: run constructor routines against fresh records.

A constructor routine has the shape ``routine(host, *args, **kwargs)``
and initialises ``host``. `instantiate` always allocates the host, so a
routine can never write onto a shared record by accident. A `Constructor`
also owns a prototype record that its instances delegate to.

Example:
    @constructor
    def Person(host, name):
        host.define("name", {"value": name, "writable": True, "enumerable": True})

    Person.prototype.define("greet", {"value": lambda self: "hi " + self.get("name")})

    alice = Person("alice")
    alice.call("greet")              # "hi alice"
    instance_of(alice, Person)       # True
"""

import logging
import weakref
from typing import Any, Callable, Optional

from attrchain.config import EngineConfig
from attrchain.descriptor import StoredDescriptor
from attrchain.errors import InstantiationError
from attrchain.record import ObjectRecord, _check_record

logger = logging.getLogger(__name__)

# Records currently being initialised by instantiate().
_under_construction: "weakref.WeakSet[ObjectRecord]" = weakref.WeakSet()


def is_under_construction(record: Any) -> bool:
    """True while `record` is the fresh host of a running instantiate()."""
    return isinstance(record, ObjectRecord) and record in _under_construction


def instantiate(ctor: Callable[..., Any], *args: Any, **kwargs: Any) -> ObjectRecord:
    """
    Create a fresh record, run `ctor` on it, and return it.

    For a `Constructor`, the fresh record delegates to its prototype and
    uses its config. If the routine returns an ObjectRecord, that record
    is returned instead of the fresh one; any other return value is
    ignored.

    Raises:
        InstantiationError: If `ctor` is not callable
    """
    if isinstance(ctor, Constructor):
        routine = ctor.routine
        host = ObjectRecord(ctor.prototype, label=ctor.name, config=ctor.config)
    elif callable(ctor):
        routine = ctor
        host = ObjectRecord(label=getattr(ctor, "__name__", None))
    else:
        raise InstantiationError(f"constructor must be callable, got {type(ctor).__name__}")

    _under_construction.add(host)
    try:
        result = routine(host, *args, **kwargs)
    finally:
        _under_construction.discard(host)

    if isinstance(result, ObjectRecord):
        return result
    return host


def instance_of(record: Any, ctor: "Constructor") -> bool:
    """True if `ctor.prototype` is in the delegation chain of `record`."""
    if not isinstance(ctor, Constructor):
        raise InstantiationError(f"instance_of needs a Constructor, got {type(ctor).__name__}")
    if not isinstance(record, ObjectRecord):
        return False
    return ctor.prototype.is_delegate_of(record)


class Constructor:
    """
    A guarded constructor routine with a shared prototype record.

    Calling the constructor is the same as ``instantiate(constructor, ...)``.

    Attributes:
        routine: The wrapped ``routine(host, *args, **kwargs)``
        name: Diagnostic name (defaults to the routine's __name__)
        prototype: Record every instance delegates to; carries a
            non-enumerable ``constructor`` attribute pointing back here
        config: EngineConfig given to instances (process default if None)
    """

    def __init__(
        self,
        routine: Callable[..., Any],
        *,
        name: Optional[str] = None,
        prototype: Optional[ObjectRecord] = None,
        config: Optional[EngineConfig] = None,
    ):
        if not callable(routine):
            raise InstantiationError(
                f"constructor routine must be callable, got {type(routine).__name__}"
            )
        self.routine = routine
        self.name = name or getattr(routine, "__name__", "anonymous")
        self.config = config
        if prototype is None:
            prototype = ObjectRecord(label=f"{self.name}.prototype", config=config)
        self.prototype = _check_record(prototype, "prototype")
        self.prototype.define(
            "constructor",
            StoredDescriptor(self, writable=True, enumerable=False, configurable=True),
        )
        self.__doc__ = getattr(routine, "__doc__", None)

    def __call__(self, *args: Any, **kwargs: Any) -> ObjectRecord:
        return instantiate(self, *args, **kwargs)

    def safe_invoke(self, maybe_context: Any, *args: Any, **kwargs: Any) -> ObjectRecord:
        """
        Run the routine on `maybe_context` only if it is a fresh host.

        A fresh host is a record under construction whose chain contains
        this constructor's prototype, such as the host of a derived
        constructor calling its parent. Anything else (a shared record,
        an already-built instance, None) is left untouched and a new
        instance is created instead.

        Returns:
            The initialised record
        """
        if is_under_construction(maybe_context) and instance_of(maybe_context, self):
            result = self.routine(maybe_context, *args, **kwargs)
            if isinstance(result, ObjectRecord):
                return result
            return maybe_context

        logger.warning(
            "%s called with ambient context %r; creating a fresh instance instead",
            self.name, maybe_context,
        )
        return instantiate(self, *args, **kwargs)

    def inherit(self, parent: "Constructor") -> "Constructor":
        """Make this constructor's prototype delegate to `parent.prototype`."""
        if not isinstance(parent, Constructor):
            raise InstantiationError(f"can only inherit from a Constructor, got {type(parent).__name__}")
        self.prototype.set_delegate(parent.prototype)
        return self

    def __repr__(self) -> str:
        return f"Constructor({self.name})"


def constructor(
    routine: Optional[Callable[..., Any]] = None,
    *,
    name: Optional[str] = None,
    config: Optional[EngineConfig] = None,
):
    """
    Decorator turning a routine into a `Constructor`.

    Usable bare (``@constructor``) or with options
    (``@constructor(name="Shape")``).
    """
    def wrap(func: Callable[..., Any]) -> Constructor:
        return Constructor(func, name=name, config=config)

    if routine is not None:
        return wrap(routine)
    return wrap
