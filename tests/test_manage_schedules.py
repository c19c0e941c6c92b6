"""
Tests for technician schedule management.
"""

from __future__ import annotations

from datetime import date, time
from zoneinfo import ZoneInfo

import pytest

from salon_scheduler.application.dto.requests import DayRangeInput, ScheduleInput
from salon_scheduler.application.exceptions import ValidationError
from salon_scheduler.application.use_cases.manage_schedules import ManageSchedulesUseCase


def _input(**overrides) -> ScheduleInput:
    values = dict(
        effective_start="2030-03-01",
        time_ranges=[
            DayRangeInput(day="Monday", begin_time="09:00", end_time="12:00"),
            DayRangeInput(day="wednesday", begin_time="13:00", end_time="17:30"),
        ],
        release_window_days=14,
    )
    values.update(overrides)
    return ScheduleInput(**values)


@pytest.fixture
def manage(schedules, clock) -> ManageSchedulesUseCase:
    return ManageSchedulesUseCase(schedules, salon_id=1, timezone=ZoneInfo("UTC"), now_fn=clock)


@pytest.mark.asyncio
async def test_create_rule(manage):
    rule_id = await manage.create_rule(1, _input())

    rule = await manage.get_rule(rule_id, 1)
    assert rule.effective_start == date(2030, 3, 1)
    assert rule.effective_end is None
    assert rule.release_window_days == 14
    assert [(r.day_of_week, r.begin_time, r.end_time) for r in rule.day_ranges] == [
        (0, time(9, 0), time(12, 0)),
        (2, time(13, 0), time(17, 30)),
    ]


@pytest.mark.asyncio
async def test_rules_belong_to_their_technician(manage):
    rule_id = await manage.create_rule(1, _input())

    assert await manage.get_rule(rule_id, 2) is None
    assert rule_id in [r.id for r in await manage.list_rules(1)]
    assert rule_id not in [r.id for r in await manage.list_rules(2)]


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "overrides",
    [
        {"effective_start": "2030/03/01"},
        {"effective_end": "2030-02-01"},
        {"release_window_days": -1},
        {"time_ranges": [DayRangeInput(day="Funday", begin_time="09:00", end_time="12:00")]},
        {"time_ranges": [DayRangeInput(day="Monday", begin_time="12:00", end_time="09:00")]},
        {"time_ranges": [DayRangeInput(day="Monday", begin_time="9", end_time="12:00")]},
    ],
)
async def test_invalid_rule_is_rejected(manage, overrides):
    with pytest.raises(ValidationError):
        await manage.create_rule(1, _input(**overrides))


@pytest.mark.asyncio
async def test_failed_update_leaves_rule_untouched(manage):
    rule_id = await manage.create_rule(1, _input())
    bad = _input(
        effective_start="2030-04-01",
        time_ranges=[DayRangeInput(day="Friday", begin_time="18:00", end_time="10:00")],
    )

    with pytest.raises(ValidationError):
        await manage.update_rule(rule_id, 1, bad)

    rule = await manage.get_rule(rule_id, 1)
    assert rule.effective_start == date(2030, 3, 1)
    assert len(rule.day_ranges) == 2


@pytest.mark.asyncio
async def test_update_replaces_ranges(manage):
    rule_id = await manage.create_rule(1, _input())

    updated = await manage.update_rule(
        rule_id,
        1,
        _input(time_ranges=[DayRangeInput(day="Friday", begin_time="10:00", end_time="14:00")]),
    )

    assert updated is True
    rule = await manage.get_rule(rule_id, 1)
    assert [r.day_name for r in rule.day_ranges] == ["Friday"]


@pytest.mark.asyncio
async def test_update_unknown_rule(manage):
    assert await manage.update_rule(999, 1, _input()) is False


@pytest.mark.asyncio
async def test_deactivate_closes_rule_today(manage, clock):
    rule_id = await manage.create_rule(1, _input(effective_start="2030-01-01"))

    assert await manage.deactivate_rule(rule_id, 1) is True

    rule = await manage.get_rule(rule_id, 1)
    assert rule.effective_end == clock().date()
    assert not rule.is_active_on(date(2030, 3, 4))
    assert await manage.deactivate_rule(rule_id, 2) is False
