"""Sources of raw scheduler text: squeue/scontrol, or canned blocks."""

import logging
import subprocess
from typing import Mapping, Protocol, Sequence

_LOGGER = logging.getLogger(__name__)


class QuerySource(Protocol):
    """Anything that can answer the three queries a snapshot needs."""

    def user_job_ids(self, user: str) -> str:
        """Whitespace-separated job ids belonging to `user`."""
        ...

    def pending_job_ids(self) -> str:
        """Whitespace-separated ids of every pending job on the cluster."""
        ...

    def job_detail(self, job_id: str) -> str:
        """The `scontrol show job` record for `job_id`, or "" if unavailable."""
        ...


def split_job_ids(output: str) -> list[str]:
    """Splits squeue output into job ids."""
    return output.split()


class SlurmQuerySource:
    """Queries a live Slurm installation through its command line tools.

    Each call blocks until the command exits. Failures are logged and turned
    into empty output so that the caller simply sees no jobs.
    """

    def __init__(self, squeue: str = "squeue", scontrol: str = "scontrol") -> None:
        self.squeue = squeue
        self.scontrol = scontrol

    def _run(self, args: Sequence[str]) -> str:
        _LOGGER.debug("running %s", " ".join(args))
        try:
            # Records may carry arbitrary bytes; they are sanitized later.
            return subprocess.check_output(
                list(args), text=True, errors="replace", stderr=subprocess.DEVNULL
            )
        except subprocess.CalledProcessError as exc:
            _LOGGER.warning("%s exited with status %s", args[0], exc.returncode)
        except OSError as exc:
            _LOGGER.warning("could not run %s: %s", args[0], exc)
        return ""

    def user_job_ids(self, user: str) -> str:
        return self._run([self.squeue, "-u", user, "-h", "-o", "%i"])

    def pending_job_ids(self) -> str:
        return self._run([self.squeue, "-h", "-t", "PD", "-o", "%i"])

    def job_detail(self, job_id: str) -> str:
        return self._run([self.scontrol, "show", "job", job_id])


class StaticQuerySource:
    """Serves fixed text blocks; used for tests and offline demos."""

    def __init__(
        self,
        details: Mapping[str, str],
        user_jobs: Mapping[str, Sequence[str]] | None = None,
        pending: Sequence[str] = (),
    ) -> None:
        self.details = dict(details)
        self.user_jobs = {user: list(ids) for user, ids in (user_jobs or {}).items()}
        self.pending = list(pending)
        self.calls: list[tuple[str, ...]] = []

    def user_job_ids(self, user: str) -> str:
        self.calls.append(("user_job_ids", user))
        return "\n".join(self.user_jobs.get(user, []))

    def pending_job_ids(self) -> str:
        self.calls.append(("pending_job_ids",))
        return "\n".join(self.pending)

    def job_detail(self, job_id: str) -> str:
        self.calls.append(("job_detail", job_id))
        return self.details.get(job_id, "")
