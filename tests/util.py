import textwrap

from slurmtop.jobs import Job


def make_job(**overrides):
    defaults = dict(
        job_id="1000",
        name="demo",
        account="lab",
        state="PENDING",
        reason="Priority",
        gpu_count=0,
        gpu_type="N/A",
        runtime="00:00:00",
        time_limit="01:00:00",
        priority=100,
    )
    return Job(**(defaults | overrides))


def scontrol_block(
    job_id="1000",
    name="demo",
    account="lab",
    state="RUNNING",
    reason="None",
    priority="100",
    runtime="00:10:00",
    time_limit="01:00:00",
    req_tres="cpu=1,mem=4G,node=1,billing=1",
    alloc_tres="cpu=1,mem=4G,node=1,billing=1",
):
    """A record shaped like `scontrol show job` output."""
    return textwrap.dedent(
        f"""\
        JobId={job_id} JobName={name}
           UserId=alice(1000) GroupId=alice(1000) MCS_label=N/A
           Priority={priority} Nice=0 Account={account} QOS=normal
           JobState={state} Reason={reason} Dependency=(null)
           RunTime={runtime} TimeLimit={time_limit} TimeMin=N/A
           ReqTRES={req_tres}
           AllocTRES={alloc_tres}
        """
    )
