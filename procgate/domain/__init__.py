"""Domain models used across application layer boundaries."""

from .models import (
    AsyncJob,
    HealthStatus,
    JobStatus,
    OutBinding,
    OutBindingKind,
    ParameterDescriptor,
    ParameterDirection,
    ProcedureCall,
    ProcedureCallValidationError,
)
from .naming import domain_format_qualified_name

__all__ = [
    "AsyncJob",
    "HealthStatus",
    "JobStatus",
    "OutBinding",
    "OutBindingKind",
    "ParameterDescriptor",
    "ParameterDirection",
    "ProcedureCall",
    "ProcedureCallValidationError",
    "domain_format_qualified_name",
]
