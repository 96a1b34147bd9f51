import pytest

from slurmtop.columns import JOB_TABLE_COLUMNS, PENDING_TABLE_COLUMNS
from slurmtop.layout import (
    available_width,
    build_table,
    compute_column_widths,
    fit_cell,
    format_header_cells,
    format_row,
    required_width,
)
from slurmtop.snapshot import QueueSnapshot

from .util import make_job


def test_required_width_adds_spacing_and_caps():
    assert required_width("JobID", []) == 6
    assert required_width("JobID", ["1234567"]) == 8
    assert required_width("JobName", ["x" * 200]) == 50


def test_available_width_reserves_separators_and_margin():
    assert available_width(80, 8) == 80 - 7 - 2
    assert available_width(5, 9) == 0


def test_unfocused_widths_share_spare_room():
    assert compute_column_widths(60, [6, 8, 10], [8, 8, 8]) == [15, 17, 17]


def test_unfocused_bonus_is_capped():
    widths = compute_column_widths(300, [10, 10], [8, 8])
    # Each column grows by at most 20, plus one unit from the remainder.
    assert widths == [31, 31]


def test_unfocused_widths_exact_fit():
    assert compute_column_widths(23, [10, 10], [8, 8]) == [10, 10]


def test_overflow_shrinks_to_minimums():
    widths = compute_column_widths(40, [20, 30, 10, 10, 10], [8, 8, 8, 8, 5])
    assert widths == [8, 12, 8, 8, 5]
    # The minimum floor is allowed to overshoot the available width.
    assert sum(widths) > available_width(40, 5)


def test_focused_column_gets_its_full_width():
    assert compute_column_widths(80, [6, 30, 10, 10], [8] * 4, focused=1) == [7, 32, 11, 11]


def test_focused_leftover_goes_to_capped_columns_first():
    assert compute_column_widths(50, [20, 10, 4, 20], [8] * 4, focused=1) == [18, 12, 4, 11]


def test_focused_column_limited_to_available_width():
    widths = compute_column_widths(40, [10, 50, 10, 10], [8] * 4, focused=1)
    assert widths == [0, 35, 0, 0]


def test_single_focused_column():
    assert compute_column_widths(40, [10], [8], focused=0) == [12]


def test_out_of_range_focus_is_ignored():
    required = [6, 8, 10]
    assert compute_column_widths(60, required, [8] * 3, focused=3) == compute_column_widths(
        60, required, [8] * 3
    )


def _sample_required(columns):
    jobs = [
        make_job(job_id="123456", name="a-rather-long-training-run-name", account="lab"),
        make_job(job_id="7", name="short", account="physics-department", reason="QOSMaxGRESPerUser"),
        make_job(job_id="88", state="RUNNING", gpu_count=8, gpu_type="h100", priority=123456789),
    ]
    snapshot = QueueSnapshot(user="alice", global_pending=jobs)
    return [
        required_width(c.header, [c.cell(job, snapshot) for job in jobs]) for c in columns
    ]


@pytest.mark.parametrize("columns", [JOB_TABLE_COLUMNS, PENDING_TABLE_COLUMNS])
def test_widths_never_exceed_available_space(columns):
    required = _sample_required(columns)
    min_widths = [c.min_width for c in columns]
    for terminal_width in range(30, 240):
        available = available_width(terminal_width, len(columns))
        for focused in range(-1, len(columns)):
            widths = compute_column_widths(terminal_width, required, min_widths, focused)
            assert len(widths) == len(columns)
            assert all(w >= 0 for w in widths)
            overflow = focused == -1 and sum(required) > available
            if not overflow:
                assert sum(widths) <= available


@pytest.mark.parametrize("columns", [JOB_TABLE_COLUMNS, PENDING_TABLE_COLUMNS])
def test_focus_never_shrinks_a_squeezed_column(columns):
    required = _sample_required(columns)
    min_widths = [c.min_width for c in columns]
    for terminal_width in range(40, 240):
        available = available_width(terminal_width, len(columns))
        unfocused = compute_column_widths(terminal_width, required, min_widths)
        for focused in range(len(columns)):
            if required[focused] + 2 > available:
                continue
            widths = compute_column_widths(terminal_width, required, min_widths, focused)
            assert widths[focused] >= required[focused]
            if sum(required) > available:
                assert widths[focused] >= unfocused[focused]


def test_focus_in_roomy_terminal_keeps_column_at_content_width():
    required = [6, 8, 10]
    unfocused = compute_column_widths(200, required, [8] * 3)
    focused = compute_column_widths(200, required, [8] * 3, focused=1)
    assert unfocused == [27, 29, 31]
    # Focus grants content plus brackets, not the spare room unfocused columns get.
    assert focused == [7, 10, 11]
    assert required[1] <= focused[1] < unfocused[1]


def test_layout_is_deterministic():
    required = _sample_required(PENDING_TABLE_COLUMNS)
    min_widths = [c.min_width for c in PENDING_TABLE_COLUMNS]
    for focused in (-1, 0, 4, 8):
        first = compute_column_widths(97, required, min_widths, focused)
        second = compute_column_widths(97, list(required), list(min_widths), focused)
        assert first == second


def test_fit_cell():
    assert fit_cell("short", 10, True) == "short"
    assert fit_cell("a-long-job-name", 8, True) == "a-lon..."
    assert fit_cell("1234567890", 8, False) == "12345678"
    assert fit_cell("abcdef", 2, True) == "ab"
    assert fit_cell("abcdef", 0, False) == ""


def test_format_header_cells_brackets_focused_column():
    cells = format_header_cells(["JobID", "JobName", "GPUs"], [6, 10, 5], focused=1)
    assert cells == ["JobID ", "[JobName] ", "GPUs "]


def test_format_header_cells_truncates():
    assert format_header_cells(["TimeLimit"], [5]) == ["TimeL"]
    assert format_header_cells(["JobName"], [5], focused=0) == ["[JobN"]


def test_format_row_truncates_unfocused_cells():
    columns = JOB_TABLE_COLUMNS[:3]
    row = format_row(["123456789", "very-long-name", "acct"], columns, [6, 8, 6], 80)
    assert row == "123456 very-... acct  "


def test_format_row_keeps_focused_cell_whole():
    columns = JOB_TABLE_COLUMNS[:3]
    row = format_row(["1", "very-long-name", "acct"], columns, [3, 4, 6], 80, focused=1)
    assert row == "1   very-long-name acct  "


def test_format_row_clamps_to_terminal():
    columns = JOB_TABLE_COLUMNS[:3]
    row = format_row(["1", "name", "account"], columns, [10, 10, 10], 20)
    assert len(row) == 18


def test_build_table_uses_all_rows_for_widths():
    jobs = [make_job(job_id=str(i), name="n" * (i + 1)) for i in range(30)]
    snapshot = QueueSnapshot(user="alice", jobs=jobs)
    full = build_table(JOB_TABLE_COLUMNS, jobs, snapshot, 120)
    window = build_table(JOB_TABLE_COLUMNS, jobs, snapshot, 120, offset=10, limit=5)
    assert window.widths == full.widths
    assert len(window.rows) == 5
    assert window.rows[0] == full.rows[10]
    assert all(len(row) <= 118 for row in full.rows)


def test_build_table_past_end_is_empty():
    jobs = [make_job(job_id="1")]
    snapshot = QueueSnapshot(user="alice", jobs=jobs)
    table = build_table(JOB_TABLE_COLUMNS, jobs, snapshot, 120, offset=5, limit=10)
    assert table.rows == []


def test_build_table_pending_rank_column():
    pending = [make_job(job_id=str(i), priority=p) for i, p in enumerate((500, 300, 300, 100))]
    snapshot = QueueSnapshot(user="alice", jobs=[pending[1]], global_pending=pending)
    table = build_table(PENDING_TABLE_COLUMNS, [pending[1]], snapshot, 200)
    assert table.header.startswith("JobID")
    assert table.rows[0].split()[-1] == "1"
    assert table.rows[0].split()[-2] == "300"


def test_build_table_focus_shows_full_cell():
    long_name = "x" * 100
    jobs = [make_job(job_id="1", name=long_name)]
    snapshot = QueueSnapshot(user="alice", jobs=jobs)
    table = build_table(JOB_TABLE_COLUMNS, jobs, snapshot, 200, focused=1)
    assert long_name in table.rows[0]
    assert table.header_cells[1].startswith("[JobName]")
    unfocused = build_table(JOB_TABLE_COLUMNS, jobs, snapshot, 200)
    assert long_name not in unfocused.rows[0]
    assert "..." in unfocused.rows[0]
