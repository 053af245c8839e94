"""
Templar faults - template layer.
"""

from typing import Any

from .core import Fault, FaultDomain


class TemplateFault(Fault):
    """Base class for template engine faults."""
    domain = FaultDomain.TEMPLATE


class InvalidExtensionError(TemplateFault):
    """
    An extension specification could not be turned into an extension.

    ``reason`` is one of:
        - "type": the value is neither an extension nor a string
        - "unresolved": the string names no service and no registered class
        - "contract": the resolved object is not an extension
    """

    code = "INVALID_EXTENSION"

    REASONS = ("type", "unresolved", "contract")

    def __init__(self, message: str, *, reason: str, spec: Any = None):
        if reason not in self.REASONS:
            raise ValueError(f"Unknown invalid-extension reason: {reason!r}")
        self.reason = reason
        self.spec = spec
        super().__init__(message, metadata={"reason": reason, "spec": repr(spec)})
