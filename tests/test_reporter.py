"""Unit tests for outcome assembly and its tabular view."""

import pytest

from core.models import Priority, ReasonCode, Schedule, UnscheduledEntry
from exceptions.custom_errors import SynthesisInvariantViolation
from scheduler.reporter import build_outcome, outcome_frames
from tests.conftest import DAY, TZ, at, item, make_task


@pytest.fixture
def tasks():
    return [
        make_task("a", 30, Priority.HIGH),
        make_task("b", 45),
        make_task("c", 60, Priority.LOW),
    ]


@pytest.fixture
def schedule(tasks):
    return Schedule(DAY, TZ, (item(tasks[0], at(9)), item(tasks[1], at(10))))


class TestBuildOutcome:
    def test_partition_of_the_pool(self, schedule, tasks):
        left_out = [UnscheduledEntry("c", ReasonCode.CAPACITY_RESERVED)]

        outcome = build_outcome(schedule, tasks, left_out, True, ReasonCode.SYNTHESIZED)

        assert outcome.schedule is schedule
        assert outcome.unscheduled == (UnscheduledEntry("c", ReasonCode.CAPACITY_RESERVED),)
        assert outcome.explanation == (
            f"Scheduled 2 of 3 task(s) for {DAY}. "
            "'C' was held back to keep room for breaks today."
        )

    def test_missing_task_is_filled(self, schedule, tasks):
        outcome = build_outcome(
            schedule, tasks, [], False, ReasonCode.NO_OP, fill_reason=ReasonCode.NO_FEASIBLE_SLOT
        )

        assert outcome.unscheduled == (UnscheduledEntry("c", ReasonCode.NO_FEASIBLE_SLOT),)

    def test_missing_task_without_fill_reason(self, schedule, tasks):
        with pytest.raises(SynthesisInvariantViolation, match="neither scheduled nor unscheduled"):
            build_outcome(schedule, tasks, [], True, ReasonCode.SYNTHESIZED)

    def test_task_in_both_lists(self, schedule, tasks):
        left_out = [
            UnscheduledEntry("a", ReasonCode.NO_FEASIBLE_SLOT),
            UnscheduledEntry("c", ReasonCode.NO_FEASIBLE_SLOT),
        ]

        with pytest.raises(SynthesisInvariantViolation, match="both scheduled and unscheduled"):
            build_outcome(schedule, tasks, left_out, True, ReasonCode.SYNTHESIZED)

    def test_unscheduled_follow_pool_order(self, tasks):
        empty = Schedule(DAY, TZ)
        left_out = [
            UnscheduledEntry("c", ReasonCode.NOT_DUE_TODAY),
            UnscheduledEntry("a", ReasonCode.PAST_DEADLINE),
            UnscheduledEntry("b", ReasonCode.NOT_DUE_TODAY),
        ]

        outcome = build_outcome(empty, tasks, left_out, True, ReasonCode.SYNTHESIZED)

        assert [u.task_id for u in outcome.unscheduled] == ["a", "b", "c"]

    def test_rejection_explanation(self, schedule, tasks):
        left_out = [UnscheduledEntry("c", ReasonCode.NO_FEASIBLE_SLOT)]

        outcome = build_outcome(schedule, tasks, left_out, False, ReasonCode.REJECTED_OVERLAP)

        assert outcome.reason.is_rejection
        assert "clashes with a blocked period" in outcome.explanation


class TestOutcomeFrames:
    def test_schedule_and_summary_tables(self, schedule, tasks):
        left_out = [UnscheduledEntry("c", ReasonCode.NO_FEASIBLE_SLOT)]
        outcome = build_outcome(schedule, tasks, left_out, True, ReasonCode.SYNTHESIZED)

        schedule_df, summary_df = outcome_frames(outcome, tasks)

        assert list(schedule_df.columns) == ["Task ID", "Title", "Start", "End", "Minutes", "Priority"]
        assert schedule_df["Task ID"].tolist() == ["a", "b"]
        assert schedule_df["Priority"].tolist() == ["high", "medium"]
        row = summary_df.iloc[0]
        assert row["Scheduled"] == 2
        assert row["Unscheduled"] == 1
        assert row["Committed Minutes"] == 75
        assert row["Reason"] == "Synthesized"

    def test_empty_schedule(self, tasks):
        left_out = [UnscheduledEntry(t.id, ReasonCode.NOT_DUE_TODAY) for t in tasks]
        outcome = build_outcome(Schedule(DAY, TZ), tasks, left_out, True, ReasonCode.SYNTHESIZED)

        schedule_df, summary_df = outcome_frames(outcome, tasks)

        assert schedule_df.empty
        assert summary_df.iloc[0]["Committed Minutes"] == 0
