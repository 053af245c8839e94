"""
Templar faults - exceptions with stable codes.

- Fault: base class (code, domain, severity, metadata)
- FaultDomain, Severity: taxonomy enums
- TemplateFault, InvalidExtensionError: template layer faults
"""

from .core import (
    Fault,
    FaultDomain,
    Severity,
)
from .domains import (
    TemplateFault,
    InvalidExtensionError,
)

__all__ = [
    "Fault",
    "FaultDomain",
    "Severity",
    "TemplateFault",
    "InvalidExtensionError",
]
