"""
mixin.py

Mixin Composer: copy attribute behavior from one record onto another.

Whole descriptors are copied, not resolved values, so a computed attribute
stays computed on the receiver and its getter/setter run with the receiver
as host. The receiver's delegate is left alone: attributes reachable only
through the supplier's delegation chain are not copied and stay
unreachable from the receiver.

Failures are collected per attribute. `compose` returns a MixinReport;
`mixin` returns the receiver and raises a single MixinError afterwards if
any attribute failed.
"""

import logging
from typing import Any, Dict, List

from attrchain.errors import AttributeModelError, MixinError
from attrchain.record import ObjectRecord, _check_record

logger = logging.getLogger(__name__)


class MixinReport:
    """
    Outcome of one composition.

    Attributes:
        receiver: The record that was written to
        copied: Names defined on the receiver, in supplier order
        skipped: Non-enumerable names that were not considered
        failures: name -> error for names that could not be copied
    """

    __slots__ = ('_receiver', '_copied', '_skipped', '_failures', '_frozen')

    def __init__(
        self,
        receiver: ObjectRecord,
        copied: List[str],
        skipped: List[str],
        failures: Dict[str, AttributeModelError],
    ):
        object.__setattr__(self, '_receiver', receiver)
        object.__setattr__(self, '_copied', tuple(copied))
        object.__setattr__(self, '_skipped', tuple(skipped))
        object.__setattr__(self, '_failures', dict(failures))
        object.__setattr__(self, '_frozen', True)

    def __setattr__(self, name: str, value: Any) -> None:
        if getattr(self, '_frozen', False):
            raise AttributeError(f"MixinReport is immutable; cannot set '{name}'")
        object.__setattr__(self, name, value)

    @property
    def receiver(self) -> ObjectRecord:
        return self._receiver

    @property
    def copied(self) -> tuple:
        return self._copied

    @property
    def skipped(self) -> tuple:
        return self._skipped

    @property
    def failures(self) -> Dict[str, AttributeModelError]:
        return dict(self._failures)

    @property
    def ok(self) -> bool:
        """True if every considered attribute was copied."""
        return not self._failures

    def to_dict(self) -> Dict[str, Any]:
        return {
            "copied": list(self._copied),
            "failures": {
                name: {"error_code": err.error_code, "message": err.message}
                for name, err in self._failures.items()
            },
            "skipped": list(self._skipped),
        }

    def __repr__(self) -> str:
        return (
            f"MixinReport(copied={len(self._copied)}, "
            f"skipped={len(self._skipped)}, failed={len(self._failures)})"
        )


def compose(
    receiver: ObjectRecord,
    supplier: ObjectRecord,
    *,
    enumerable_only: bool = True,
) -> MixinReport:
    """
    Copy every own descriptor of `supplier` onto `receiver`.

    Each copy goes through `receiver.define`, so the receiver's lock state
    and its non-configurable attributes are respected. A failing name is
    recorded and the remaining names are still copied.

    Args:
        receiver: Record receiving the attributes
        supplier: Record whose own attributes are copied
        enumerable_only: Skip non-enumerable attributes (default True)

    Returns:
        MixinReport describing what was copied, skipped and refused
    """
    _check_record(receiver, "receiver")
    _check_record(supplier, "supplier")

    copied: List[str] = []
    skipped: List[str] = []
    failures: Dict[str, AttributeModelError] = {}

    for name in supplier.own_keys():
        descriptor = supplier.get_own_descriptor(name)
        if enumerable_only and not descriptor.enumerable:
            skipped.append(name)
            continue
        try:
            receiver.define(name, descriptor.replace())
        except AttributeModelError as exc:
            failures[name] = exc
            continue
        copied.append(name)

    report = MixinReport(receiver, copied, skipped, failures)
    if failures:
        logger.warning(
            "mixin %r <- %r: %d attribute(s) not copied: %s",
            receiver, supplier, len(failures), ", ".join(failures),
        )
    return report


def mixin(receiver: ObjectRecord, supplier: ObjectRecord) -> ObjectRecord:
    """
    Copy the enumerable own attributes of `supplier` onto `receiver`.

    Returns:
        The receiver

    Raises:
        MixinError: After all names were attempted, if any failed; the
            error's `report` lists what was actually copied
    """
    report = compose(receiver, supplier)
    if not report.ok:
        raise MixinError(report)
    return receiver
