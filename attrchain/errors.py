"""
errors.py

Error kinds raised by the attrchain engine.

Design principles:
- Every failure names the attribute and record involved
- Explain what went wrong in plain language
- Suggest fixes when possible
- Never expose internal stack traces to end users
"""

from typing import Any, Dict, List, Optional


class AttributeModelError(Exception):
    """
    Base class for all attrchain errors.

    Carries a stable error code, a one-line message, and optional
    explanation and suggestions for human-facing output.
    """

    def __init__(
        self,
        message: str,
        *,
        explanation: str = "",
        suggestions: Optional[List[str]] = None,
        error_code: str = "A000",
    ):
        self.message = message
        self.explanation = explanation
        self.suggestions = suggestions or []
        self.error_code = error_code
        super().__init__(self.format_short())

    def format_short(self) -> str:
        """Format as single-line error message."""
        return f"[{self.error_code}] {self.message}"

    def format_full(self) -> str:
        """Format as multi-line human-readable error."""
        lines = [f"Error {self.error_code}", "", f"  {self.message}"]

        if self.explanation:
            lines.append("")
            lines.append(f"  {self.explanation}")

        if self.suggestions:
            lines.append("")
            if len(self.suggestions) == 1:
                lines.append(f"  Suggestion: {self.suggestions[0]}")
            else:
                lines.append("  Suggestions:")
                for suggestion in self.suggestions:
                    lines.append(f"    - {suggestion}")

        return "\n".join(lines)


def _where(record: Any) -> str:
    if record is None:
        return ""
    label = getattr(record, "label", None)
    return f" on {label}" if label else ""


# === Configuration Errors (A0xx) ===

class ConfigurationError(AttributeModelError):
    """Raised when an EngineConfig value is invalid."""

    def __init__(self, field_name: str, reason: str):
        self.field_name = field_name
        self.reason = reason
        super().__init__(
            f"Invalid configuration for '{field_name}': {reason}",
            error_code="A001",
        )


# === Definition Errors (A1xx) ===

class DefinitionError(AttributeModelError):
    """Raised when a descriptor is malformed."""

    def __init__(
        self,
        reason: str,
        name: Optional[str] = None,
        *,
        suggestions: Optional[List[str]] = None,
        error_code: str = "A100",
    ):
        self.name = name
        self.reason = reason
        prefix = f"Invalid descriptor for '{name}'" if name else "Invalid descriptor"
        super().__init__(
            f"{prefix}: {reason}",
            explanation=(
                "A descriptor is either stored (value, writable) or computed "
                "(get and/or set), never both."
            ),
            suggestions=suggestions,
            error_code=error_code,
        )


class InvalidAttributeNameError(DefinitionError):
    """Raised when an attribute name is not a non-empty string."""

    def __init__(self, name: Any):
        self.name_type = type(name).__name__
        super().__init__(
            f"attribute names must be non-empty strings, got {self.name_type}: {name!r}",
            suggestions=["Use a plain string such as 'color' or '_color'"],
            error_code="A101",
        )
        self.name = name


# === Structural Errors (A2xx) ===

class NotExtensibleError(AttributeModelError):
    """Raised when adding an attribute to a non-extensible record."""

    def __init__(self, name: str, record: Any = None):
        self.name = name
        self.record = record
        super().__init__(
            f"Cannot add attribute '{name}'{_where(record)}: record is not extensible",
            explanation="Sealed and frozen records do not accept new attributes.",
            suggestions=[
                "Define the attribute before sealing or freezing the record",
                "Add it to a delegate instead, which remains extensible",
            ],
            error_code="A201",
        )


class NotConfigurableError(AttributeModelError):
    """Raised when redefining or removing a non-configurable attribute."""

    def __init__(
        self,
        name: str,
        record: Any = None,
        changed: Optional[List[str]] = None,
        operation: str = "redefine",
    ):
        self.name = name
        self.record = record
        self.changed = list(changed or [])
        self.operation = operation
        detail = f" (changed: {', '.join(self.changed)})" if self.changed else ""
        super().__init__(
            f"Cannot {operation} attribute '{name}'{_where(record)}: "
            f"attribute is not configurable{detail}",
            explanation=(
                "Once configurable is false, only narrowing writable from "
                "true to false is permitted."
            ),
            error_code="A202",
        )


class SealedError(AttributeModelError):
    """Raised when removing an attribute from a sealed or frozen record."""

    def __init__(self, name: str, record: Any = None):
        self.name = name
        self.record = record
        super().__init__(
            f"Cannot remove attribute '{name}'{_where(record)}: record is sealed",
            error_code="A203",
        )


# === Access Errors (A3xx) ===

class NotWritableError(AttributeModelError):
    """Raised when writing a read-only attribute."""

    def __init__(self, name: str, record: Any = None, reason: str = "attribute is read-only"):
        self.name = name
        self.record = record
        self.reason = reason
        super().__init__(
            f"Cannot assign to '{name}'{_where(record)}: {reason}",
            error_code="A301",
        )


class NotReadableError(AttributeModelError):
    """Raised when reading a computed attribute that has no getter."""

    def __init__(self, name: str, record: Any = None):
        self.name = name
        self.record = record
        super().__init__(
            f"Cannot read '{name}'{_where(record)}: attribute has a setter but no getter",
            error_code="A302",
        )


class NotCallableError(AttributeModelError):
    """Raised when calling an attribute whose value is not callable."""

    def __init__(self, name: str, value: Any, record: Any = None):
        self.name = name
        self.value = value
        self.record = record
        super().__init__(
            f"Attribute '{name}'{_where(record)} is not callable "
            f"(got {type(value).__name__})",
            error_code="A303",
        )


class AttributeNotFoundError(AttributeModelError):
    """Raised when a strict lookup finds no owner in the delegation chain."""

    def __init__(self, name: str, record: Any = None):
        self.name = name
        self.record = record
        super().__init__(
            f"Attribute '{name}' not found{_where(record)} or its delegates",
            error_code="A304",
        )


# === Delegation Errors (A4xx) ===

class CyclicDelegationError(AttributeModelError):
    """Raised when chain traversal revisits a record or exceeds the depth bound."""

    def __init__(self, path: List[str], max_depth: Optional[int] = None):
        self.path = list(path)
        self.max_depth = max_depth
        path_str = " -> ".join(self.path)
        if max_depth is not None:
            message = f"Delegation chain exceeds {max_depth} records: {path_str}"
        else:
            message = f"Cyclic delegation detected: {path_str}"
        super().__init__(
            message,
            explanation="Delegation chains must end in a record with no delegate.",
            suggestions=["Break the cycle with set_delegate(None)"],
            error_code="A401",
        )


# === Construction Errors (A5xx) ===

class InstantiationError(AttributeModelError):
    """Raised when a constructor routine cannot be used."""

    def __init__(self, reason: str):
        self.reason = reason
        super().__init__(f"Cannot instantiate: {reason}", error_code="A501")


# === Composition Errors (A6xx) ===

class MixinError(AttributeModelError):
    """Raised once after a mixin when one or more attributes failed to copy."""

    def __init__(self, report: Any):
        self.report = report
        failures: Dict[str, AttributeModelError] = report.failures
        names = ", ".join(failures)
        super().__init__(
            f"Mixin copied {len(report.copied)} attribute(s), "
            f"{len(failures)} failed: {names}",
            suggestions=[f"{name}: {err.message}" for name, err in failures.items()],
            error_code="A601",
        )


# === Utility Functions ===

def format_error_for_user(error: BaseException) -> str:
    """
    Format any exception for user display.

    For AttributeModelError instances, returns the human-friendly format.
    For other exceptions, returns a generic message without stack trace.
    """
    if isinstance(error, AttributeModelError):
        return error.format_full()

    return (
        "Error A000\n"
        "\n"
        "  An unexpected error occurred.\n"
        "\n"
        "  If this persists, please report it as a bug."
    )
