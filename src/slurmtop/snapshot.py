"""Point-in-time view of one user's jobs and the cluster pending queue."""

import dataclasses
import datetime
import logging
from collections import Counter
from typing import Iterable

from .jobs import Job, JobState, parse_job_details
from .query import QuerySource, split_job_ids

_LOGGER = logging.getLogger(__name__)


@dataclasses.dataclass
class QueueSnapshot:
    """Everything fetched in one poll cycle.

    A snapshot is never updated in place; refreshing builds a new one.
    """

    user: str
    jobs: list[Job] = dataclasses.field(default_factory=list)
    global_pending: list[Job] = dataclasses.field(default_factory=list)
    running: int = 0
    pending: int = 0
    gpus_running: dict[str, int] = dataclasses.field(default_factory=dict)
    gpus_requested: dict[str, int] = dataclasses.field(default_factory=dict)
    timestamp: datetime.datetime = dataclasses.field(
        default_factory=datetime.datetime.now
    )

    @property
    def total(self) -> int:
        return len(self.jobs)

    @property
    def other(self) -> int:
        return self.total - self.running - self.pending

    def running_jobs(self) -> list[Job]:
        return [j for j in self.jobs if j.category is JobState.RUNNING]

    def pending_jobs(self) -> list[Job]:
        """User's pending jobs, highest priority first (stable on ties)."""
        pending = [j for j in self.jobs if j.category is JobState.PENDING]
        return sorted(pending, key=lambda j: j.priority, reverse=True)

    def rank(self, job: Job) -> int:
        return rank(job, self.global_pending)


def rank(job: Job, global_pending: Iterable[Job]) -> int:
    """Number of pending jobs with strictly higher priority than `job`."""
    return sum(1 for other in global_pending if other.priority > job.priority)


def _fetch_jobs(source: QuerySource, job_ids: list[str]) -> Iterable[Job]:
    for job_id in job_ids:
        block = source.job_detail(job_id)
        if not block:
            _LOGGER.debug("no details for job %s, skipping", job_id)
            continue
        yield parse_job_details(job_id, block)


def build_snapshot(source: QuerySource, user: str) -> QueueSnapshot:
    """Polls `source` sequentially and returns a fresh snapshot."""
    jobs = list(_fetch_jobs(source, split_job_ids(source.user_job_ids(user))))

    states: Counter = Counter()
    gpus_running: Counter = Counter()
    gpus_requested: Counter = Counter()
    for job in jobs:
        states[job.category] += 1
        if job.gpu_count <= 0:
            continue
        if job.category is JobState.RUNNING:
            gpus_running[job.gpu_type] += job.gpu_count
        elif job.category is JobState.PENDING:
            gpus_requested[job.gpu_type] += job.gpu_count

    global_pending = [
        job
        for job in _fetch_jobs(source, split_job_ids(source.pending_job_ids()))
        if job.priority > 0
    ]
    global_pending.sort(key=lambda j: j.priority, reverse=True)

    _LOGGER.debug(
        "snapshot for %s: %d jobs, %d pending cluster-wide",
        user,
        len(jobs),
        len(global_pending),
    )
    return QueueSnapshot(
        user=user,
        jobs=jobs,
        global_pending=global_pending,
        running=states[JobState.RUNNING],
        pending=states[JobState.PENDING],
        gpus_running=dict(gpus_running),
        gpus_requested=dict(gpus_requested),
    )
