"""
attrchain: Dynamic Attribute and Delegation Engine
==================================================

attrchain represents objects as mutable collections of named attributes.
Each attribute is governed by its own descriptor, lookups walk a chain of
delegate records, and extensibility locks tighten what may still change.

What's Public
-------------
Everything exported in ``__all__`` is public:

- **Descriptors**: StoredDescriptor, ComputedDescriptor, shorthand
- **Records**: ObjectRecord, OwnKeys, ABSENT
- **Locks**: Extensibility, prevent_extensions, seal, freeze
- **Composition**: mixin, compose, MixinReport
- **Construction**: instantiate, Constructor, constructor, instance_of
- **Configuration**: EngineConfig, get_default_config, set_default_config
- **Exceptions**: AttributeModelError and its subclasses

Example
-------
::

    from attrchain import ObjectRecord, seal

    counter = ObjectRecord(label="counter")
    counter.define("count", {
        "value": 0, "writable": True, "enumerable": True, "configurable": True,
    })
    seal(counter)

    counter.set("count", 1)          # allowed: still writable
    counter.get("count")             # 1
    counter.define("count", {"value": 2})   # NotConfigurableError
"""

__version__ = "1.0.0"

__all__ = [
    # --- Package Metadata ---
    "__version__",

    # --- Descriptors ---
    "Descriptor",
    "StoredDescriptor",
    "ComputedDescriptor",
    "shorthand",
    "open_descriptor",
    "to_descriptor",

    # --- Records ---
    "ObjectRecord",
    "OwnKeys",
    "ABSENT",
    "iter_chain",
    "resolve_get",
    "resolve_set",

    # --- Extensibility ---
    "Extensibility",
    "prevent_extensions",
    "seal",
    "freeze",
    "is_extensible",
    "is_sealed",
    "is_frozen",

    # --- Composition ---
    "mixin",
    "compose",
    "MixinReport",

    # --- Construction ---
    "instantiate",
    "instance_of",
    "is_under_construction",
    "Constructor",
    "constructor",

    # --- Configuration ---
    "EngineConfig",
    "get_default_config",
    "set_default_config",

    # --- Exceptions ---
    "AttributeModelError",
    "ConfigurationError",
    "DefinitionError",
    "InvalidAttributeNameError",
    "NotExtensibleError",
    "NotConfigurableError",
    "SealedError",
    "NotWritableError",
    "NotReadableError",
    "NotCallableError",
    "AttributeNotFoundError",
    "CyclicDelegationError",
    "InstantiationError",
    "MixinError",
    "format_error_for_user",
]

from attrchain.config import EngineConfig, get_default_config, set_default_config
from attrchain.construct import (
    Constructor,
    constructor,
    instance_of,
    instantiate,
    is_under_construction,
)
from attrchain.descriptor import (
    ComputedDescriptor,
    Descriptor,
    StoredDescriptor,
    open_descriptor,
    shorthand,
    to_descriptor,
)
from attrchain.errors import (
    AttributeModelError,
    AttributeNotFoundError,
    ConfigurationError,
    CyclicDelegationError,
    DefinitionError,
    InstantiationError,
    InvalidAttributeNameError,
    MixinError,
    NotCallableError,
    NotConfigurableError,
    NotExtensibleError,
    NotReadableError,
    NotWritableError,
    SealedError,
    format_error_for_user,
)
from attrchain.extensibility import (
    Extensibility,
    freeze,
    is_extensible,
    is_frozen,
    is_sealed,
    prevent_extensions,
    seal,
)
from attrchain.mixin import MixinReport, compose, mixin
from attrchain.record import ObjectRecord, OwnKeys
from attrchain.resolver import ABSENT, iter_chain, resolve_get, resolve_set
