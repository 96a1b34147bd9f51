"""Column metadata for the job tables."""

import dataclasses
from typing import Callable

from .jobs import Job
from .snapshot import QueueSnapshot


@dataclasses.dataclass(frozen=True)
class Column:
    """One table column.

    Attributes:
        header: Header text.
        min_width: Smallest width the column is squeezed to on overflow.
        ellipsis: Whether truncated content ends in "..." (free text) or is
            simply cut (short, bounded fields).
        cell: Extracts the display text for a job.
    """

    header: str
    min_width: int
    ellipsis: bool
    cell: Callable[[Job, QueueSnapshot], str]


JOB_ID = Column("JobID", 8, False, lambda job, _: job.job_id)
NAME = Column("JobName", 8, True, lambda job, _: job.name)
ACCOUNT = Column("Account", 8, True, lambda job, _: job.account)
TIME_LIMIT = Column("TimeLimit", 5, False, lambda job, _: job.time_limit)
GPUS = Column("GPUs", 5, False, lambda job, _: str(job.gpu_count))
GPU_TYPE = Column("GPU Type", 8, True, lambda job, _: job.gpu_label)

JOB_TABLE_COLUMNS: list[Column] = [
    JOB_ID,
    NAME,
    ACCOUNT,
    Column("Runtime", 8, False, lambda job, _: job.runtime),
    TIME_LIMIT,
    GPUS,
    GPU_TYPE,
    Column("Status", 8, False, lambda job, _: job.state),
]

PENDING_TABLE_COLUMNS: list[Column] = [
    JOB_ID,
    NAME,
    ACCOUNT,
    Column("Reason", 8, True, lambda job, _: job.reason),
    TIME_LIMIT,
    GPUS,
    GPU_TYPE,
    Column("Priority", 8, False, lambda job, _: str(job.priority)),
    Column("Higher", 8, False, lambda job, snapshot: str(snapshot.rank(job))),
]

__all__ = ["Column", "JOB_TABLE_COLUMNS", "PENDING_TABLE_COLUMNS"]
