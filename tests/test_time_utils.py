from datetime import time

import pytest

from core.models import BlockedInterval
from utils.time_utils import (
    blocked_occurrences,
    earliest_start,
    get_zone,
    merge_intervals,
    overlap_minutes,
)
from tests.conftest import DAY, TZ, at


def test_earliest_start_rounds_up_to_the_next_minute():
    now = at(9, 20).replace(second=1)

    assert earliest_start(now, at(9)) == at(9, 21)
    assert earliest_start(at(9, 20), at(9)) == at(9, 21)
    assert earliest_start(at(7), at(9)) == at(9)


def test_wrapping_interval_covers_both_mornings_and_evenings():
    sleep = BlockedInterval("Sleep", time(22), time(7))

    occurrences = blocked_occurrences(DAY, [sleep], TZ)

    assert [(s.hour, e.hour) for s, e, _ in occurrences] == [(22, 7), (22, 7)]
    assert occurrences[0][1] == at(7)
    assert occurrences[1][0] == at(22)


def test_merge_and_overlap():
    merged = merge_intervals([(at(11), at(12)), (at(9), at(10)), (at(9, 30), at(10, 30))])

    assert merged == [(at(9), at(10, 30)), (at(11), at(12))]
    assert overlap_minutes(at(9), at(10), at(9, 45), at(11)) == 15
    assert overlap_minutes(at(9), at(10), at(10), at(11)) == 0


def test_unknown_zone():
    with pytest.raises(ValueError, match="Unknown time zone"):
        get_zone("Nowhere/Atlantis")
