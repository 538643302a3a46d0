from __future__ import annotations

from enum import Enum

"""RunPhase enum for the sync run state machine.

State transitions (one run = one pass):
    init -> scanning -> deletion-check -> reading -> writing -> done
    any state -> failed
"""

__all__ = [
    "RunPhase",
]


class RunPhase(Enum):
    """Phase of a sync run.

    - INIT: stores opened, status cleared
    - SCANNING: folder tree enumerated, managed region snapshot read
    - DELETION_CHECK: survivor partition against the file snapshot
    - READING: new files parsed (reported once per file)
    - WRITING: single clear-then-write of the managed region
    - DONE: terminal, success (including no-op)
    - FAILED: terminal, failure in any of the above
    """
    INIT = "init"
    SCANNING = "scanning"
    DELETION_CHECK = "deletion-check"
    READING = "reading"
    WRITING = "writing"
    DONE = "done"
    FAILED = "failed"

    @property
    def is_terminal(self) -> bool:
        return self in (RunPhase.DONE, RunPhase.FAILED)
