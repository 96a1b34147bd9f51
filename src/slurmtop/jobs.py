"""Parsing of `scontrol show job` records into Job entries."""

import dataclasses
import enum
import re

NO_GPU_TYPE = "N/A"
UNTYPED_GPU = "generic"

_TYPED_GPU = "gres/gpu:"
_UNTYPED_GPU = "gres/gpu="

_INT64_MIN = -(2**63)
_INT64_MAX = 2**63 - 1
_INT32_MAX = 2**31 - 1

_LEADING_INT = re.compile(r"\s*([+-]?\d+)")


class JobState(enum.Enum):
    """Coarse job classification used for aggregation."""

    RUNNING = "RUNNING"
    PENDING = "PENDING"
    OTHER = "OTHER"

    @classmethod
    def classify(cls, state: str) -> "JobState":
        if state == "RUNNING":
            return cls.RUNNING
        if state == "PENDING":
            return cls.PENDING
        return cls.OTHER


@dataclasses.dataclass
class Job:
    """Represents a single Slurm job as reported by scontrol."""

    job_id: str
    name: str = ""
    account: str = ""
    state: str = ""
    reason: str = ""
    gpu_count: int = 0
    gpu_type: str = NO_GPU_TYPE
    runtime: str = ""
    time_limit: str = ""
    priority: int = 0

    @property
    def category(self) -> JobState:
        return JobState.classify(self.state)

    @property
    def gpu_label(self) -> str:
        """GPU type as shown in tables; only meaningful when GPUs are present."""
        return self.gpu_type if self.gpu_count > 0 else NO_GPU_TYPE


def sanitize(text: str) -> str:
    """Drops everything outside printable ASCII, turning tabs into spaces."""
    return "".join(
        " " if c == "\t" else c for c in text if c == "\t" or 32 <= ord(c) <= 126
    )


def parse_int(text: str, lo: int = _INT64_MIN, hi: int = _INT64_MAX) -> int:
    """Parses the leading integer of `text`, returning 0 on failure.

    Leading whitespace and trailing garbage are tolerated (`"4(S:0)"` -> 4).
    Values outside `[lo, hi]` count as failures.
    """
    match = _LEADING_INT.match(text)
    if match is None:
        return 0
    value = int(match.group(1))
    if value < lo or value > hi:
        return 0
    return value


def extract_field(block: str, field: str) -> str:
    """Returns the sanitized value of `field=` in a scontrol record.

    The value ends at the next space, else the next newline, else the end of
    the block. Missing fields yield an empty string.
    """
    pos = block.find(field + "=")
    if pos == -1:
        return ""

    pos += len(field) + 1
    end = block.find(" ", pos)
    if end == -1:
        end = block.find("\n", pos)
    if end == -1:
        end = len(block)
    return sanitize(block[pos:end])


def _count_end(block: str, start: int) -> int:
    ends = [i for i in (block.find(c, start) for c in " ,\n") if i != -1]
    return min(ends) if ends else len(block)


def _parse_gpu_count(text: str) -> int:
    count = parse_int(text, hi=_INT32_MAX)
    return count if count > 0 else 0


def extract_gpu_info(block: str, field: str) -> tuple[int, str]:
    """Derives (count, type) of GPUs from a TRES field such as AllocTRES.

    A typed `gres/gpu:TYPE=COUNT` entry wins over an untyped `gres/gpu=COUNT`
    one. Both are searched from the field marker to the end of the block.
    """
    field_pos = block.find(field + "=")
    if field_pos == -1:
        return 0, NO_GPU_TYPE

    typed_pos = block.find(_TYPED_GPU, field_pos)
    if typed_pos != -1:
        type_start = typed_pos + len(_TYPED_GPU)
        type_end = block.find("=", type_start)
        if type_end != -1:
            gpu_type = sanitize(block[type_start:type_end])
            count_end = _count_end(block, type_end + 1)
            return _parse_gpu_count(block[type_end + 1 : count_end]), gpu_type

    untyped_pos = block.find(_UNTYPED_GPU, field_pos)
    if untyped_pos != -1:
        count_start = untyped_pos + len(_UNTYPED_GPU)
        count_end = _count_end(block, count_start)
        return _parse_gpu_count(block[count_start:count_end]), UNTYPED_GPU

    return 0, NO_GPU_TYPE


def parse_job_details(job_id: str, block: str) -> Job:
    """Builds a Job from the `scontrol show job` output for `job_id`."""
    state = extract_field(block, "JobState")

    # Running jobs report what they hold; others report what they asked for.
    if JobState.classify(state) is JobState.RUNNING:
        gpu_count, gpu_type = extract_gpu_info(block, "AllocTRES")
    else:
        gpu_count, gpu_type = extract_gpu_info(block, "ReqTRES")
        if gpu_count == 0:
            gpu_count, gpu_type = extract_gpu_info(block, "AllocTRES")

    return Job(
        job_id=job_id,
        name=extract_field(block, "JobName"),
        account=extract_field(block, "Account"),
        state=state,
        reason=extract_field(block, "Reason"),
        gpu_count=gpu_count,
        gpu_type=gpu_type,
        runtime=extract_field(block, "RunTime"),
        time_limit=extract_field(block, "TimeLimit"),
        priority=parse_int(extract_field(block, "Priority")),
    )
