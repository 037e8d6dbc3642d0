"""Repository layer for SkillPulse.

Ports (abstract base classes) for document storage and identity, plus the
task repository written against them.

Implementations (Adapters) are in:
- skillpulse_cli.adapters.sqlite (local vault)
- skillpulse_cli.adapters.firebase (remote Firebase project)
- skillpulse_cli.adapters.memory (in-process, for tests)
"""

from .identity import IdentityProvider
from .repository import DocumentStore
from .task_ids import CounterTaskIdAllocator, ScanTaskIdAllocator, TaskIdAllocator
from .task_repository import PAGE_SIZE, TaskRepository, filter_by_date, suggest_descriptions

__all__ = [
    "DocumentStore",
    "IdentityProvider",
    "TaskIdAllocator",
    "ScanTaskIdAllocator",
    "CounterTaskIdAllocator",
    "TaskRepository",
    "filter_by_date",
    "suggest_descriptions",
    "PAGE_SIZE",
]
