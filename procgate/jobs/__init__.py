"""Job layer owning async invocation lifecycle and retention."""

from .interfaces import JobRegistryPort, JobRunnerPort, JobTransitionError, JobUpdate
from .registry import JobRegistry
from .runner import JOB_CHECKPOINT_PROGRESS, JOB_DISPATCH_PROGRESS, JobRunner
from .sweeper import RetentionSweeper

__all__ = [
    "JOB_CHECKPOINT_PROGRESS",
    "JOB_DISPATCH_PROGRESS",
    "JobRegistry",
    "JobRegistryPort",
    "JobRunner",
    "JobRunnerPort",
    "JobTransitionError",
    "JobUpdate",
    "RetentionSweeper",
]
