"""
Templar faults - base fault type.

A fault is an exception with a stable machine-readable code and the
domain it belongs to, so callers can branch on ``code`` instead of
parsing messages.
"""

from __future__ import annotations

from enum import Enum
from typing import Any, ClassVar, Mapping, Optional


class Severity(str, Enum):
    INFO = "info"
    WARN = "warn"
    ERROR = "error"
    FATAL = "fatal"


class FaultDomain(str, Enum):
    """Area of Templar a fault comes from."""
    CONFIG = "config"
    DI = "di"
    TEMPLATE = "template"


# Configuration faults stop the application from booting
_DEFAULT_SEVERITY = {
    FaultDomain.CONFIG: Severity.FATAL,
    FaultDomain.DI: Severity.ERROR,
    FaultDomain.TEMPLATE: Severity.ERROR,
}


class Fault(Exception):
    """
    Exception with a code, a domain and structured metadata.

    Subclasses normally pin ``code`` and ``domain`` as class attributes
    and are raised with a message only:

        class TemplateMissing(Fault):
            code = "TEMPLATE_MISSING"
            domain = FaultDomain.TEMPLATE

        raise TemplateMissing("Template 'pages::home' not found")
    """

    code: ClassVar[Optional[str]] = None
    domain: ClassVar[Optional[FaultDomain]] = None

    def __init__(
        self,
        message: str,
        *,
        code: Optional[str] = None,
        domain: Optional[FaultDomain | str] = None,
        severity: Optional[Severity | str] = None,
        metadata: Optional[Mapping[str, Any]] = None,
    ):
        code = code or type(self).code
        domain = domain or type(self).domain
        if not code or domain is None:
            raise TypeError(f"{type(self).__name__} needs a fault code and domain")

        super().__init__(message)
        self.message = message
        self.code = code
        self.domain = FaultDomain(domain)
        self.severity = Severity(severity) if severity else _DEFAULT_SEVERITY[self.domain]
        self.metadata = dict(metadata or {})

    def __str__(self) -> str:
        return f"[{self.code}] {self.message}"

    def __repr__(self) -> str:
        return f"{type(self).__name__}(code={self.code!r}, domain={self.domain.value!r})"

    def to_dict(self) -> dict[str, Any]:
        """Plain-data view for logs and JSON output."""
        return {
            "code": self.code,
            "domain": self.domain.value,
            "severity": self.severity.value,
            "message": self.message,
            "metadata": self.metadata,
        }
