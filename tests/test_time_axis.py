import pytest
from datetime import date, datetime, time, timedelta, timezone

import pytz

from conferia_schedule.records import SingleRecord, record_id
from conferia_schedule.time_axis import (
    MINIMUM_INTERVAL,
    day_count,
    day_index,
    day_offset,
    earliest_day,
    earliest_time_of_day,
    effective_interval,
    latest_day,
    latest_time_of_day,
    pixels_per_second,
    shortest_interval,
    tick_interval,
    time_offset,
    time_ticks,
)

TZ = timezone(timedelta(hours=2))


def event(start: datetime, end: datetime, title="E"):
    return SingleRecord(
        id=record_id(start, end, "single", title),
        type="single",
        date_start=start,
        date_end=end,
        title=title,
    )


def test_time_of_day_range_ignores_dates():
    records = [
        event(datetime(2024, 5, 1, 14, 0, tzinfo=TZ), datetime(2024, 5, 1, 15, 0, tzinfo=TZ)),
        event(datetime(2024, 5, 2, 9, 0, tzinfo=TZ), datetime(2024, 5, 2, 10, 0, tzinfo=TZ)),
    ]
    assert earliest_time_of_day(records) == time(9, 0)
    assert latest_time_of_day(records) == time(15, 0)


def test_time_of_day_uses_wall_clock_of_each_zone():
    utc = timezone.utc
    records = [
        event(datetime(2024, 5, 1, 8, 0, tzinfo=utc), datetime(2024, 5, 1, 9, 0, tzinfo=utc)),
        event(datetime(2024, 5, 1, 9, 30, tzinfo=TZ), datetime(2024, 5, 1, 10, 0, tzinfo=TZ)),
    ]
    # 09:30+02:00 is earlier than 08:00Z as an instant, but later on the clock
    assert earliest_time_of_day(records) == time(8, 0)
    assert latest_time_of_day(records) == time(10, 0)


def test_earliest_and_latest_day():
    a = event(datetime(2024, 5, 2, 9, 0, tzinfo=TZ), datetime(2024, 5, 2, 18, 0, tzinfo=TZ))
    b = event(datetime(2024, 5, 1, 11, 0, tzinfo=TZ), datetime(2024, 5, 1, 12, 0, tzinfo=TZ))
    assert earliest_day([a, b]) == b.date_start
    assert latest_day([a, b]) == a.date_end


def test_empty_records():
    assert earliest_time_of_day([]) is None
    assert latest_time_of_day([]) is None
    assert earliest_day([]) is None
    assert shortest_interval([]) is None
    assert day_count([]) == 0


class TestDayCount:
    def test_single_day(self):
        r = event(datetime(2024, 5, 1, 9, 0, tzinfo=TZ), datetime(2024, 5, 1, 17, 0, tzinfo=TZ))
        assert day_count([r]) == 1

    def test_consecutive_days(self):
        records = [
            event(datetime(2024, 5, 1, 10, 0, tzinfo=TZ), datetime(2024, 5, 1, 11, 0, tzinfo=TZ)),
            event(datetime(2024, 5, 2, 10, 0, tzinfo=TZ), datetime(2024, 5, 2, 11, 0, tzinfo=TZ)),
        ]
        assert day_count(records) == 2

    def test_early_start_on_next_day(self):
        # Second day starts earlier on the clock than the first one
        records = [
            event(datetime(2024, 5, 1, 12, 0, tzinfo=TZ), datetime(2024, 5, 1, 13, 0, tzinfo=TZ)),
            event(datetime(2024, 5, 2, 8, 0, tzinfo=TZ), datetime(2024, 5, 2, 9, 0, tzinfo=TZ)),
        ]
        assert day_count(records) == 2

    def test_ending_at_midnight(self):
        r = event(datetime(2024, 5, 1, 22, 0, tzinfo=TZ), datetime(2024, 5, 2, 0, 0, tzinfo=TZ))
        assert day_count([r]) == 1

    def test_ending_after_midnight(self):
        r = event(datetime(2024, 5, 1, 22, 0, tzinfo=TZ), datetime(2024, 5, 2, 0, 30, tzinfo=TZ))
        assert day_count([r]) == 2

    def test_dst_change(self):
        berlin = pytz.timezone("Europe/Berlin")
        records = [
            event(berlin.localize(datetime(2024, 3, 30, 10, 0)), berlin.localize(datetime(2024, 3, 30, 11, 0))),
            event(berlin.localize(datetime(2024, 3, 31, 22, 0)), berlin.localize(datetime(2024, 4, 1, 0, 0))),
        ]
        assert day_count(records) == 2

    def test_zero_length_event_at_next_midnight(self):
        records = [
            event(datetime(2024, 5, 1, 10, 0, tzinfo=TZ), datetime(2024, 5, 1, 11, 0, tzinfo=TZ)),
            event(datetime(2024, 5, 2, 0, 0, tzinfo=TZ), datetime(2024, 5, 2, 0, 0, tzinfo=TZ)),
        ]
        assert day_count(records) == 2

    def test_mixed_offsets_read_in_first_zone(self):
        utc = timezone.utc
        far_east = timezone(timedelta(hours=14))
        # 02:00 on May 2nd at +14:00 is still May 1st in UTC
        records = [
            event(datetime(2024, 5, 1, 10, 0, tzinfo=utc), datetime(2024, 5, 1, 11, 0, tzinfo=utc)),
            event(datetime(2024, 5, 2, 2, 0, tzinfo=far_east), datetime(2024, 5, 2, 3, 0, tzinfo=far_east)),
        ]
        assert day_count(records) == 1


def test_day_index():
    first = datetime(2024, 5, 1, 10, 0, tzinfo=timezone.utc)
    far_east = timezone(timedelta(hours=14))
    assert day_index(datetime(2024, 5, 2, 2, 0, tzinfo=far_east), first) == 0
    assert day_index(datetime(2024, 5, 2, 23, 0, tzinfo=far_east), first) == 1
    assert day_index(datetime(2024, 5, 3, 0, 0, tzinfo=timezone.utc), first) == 2


def test_shortest_interval():
    records = [
        event(datetime(2024, 5, 1, 9, 0, tzinfo=TZ), datetime(2024, 5, 1, 10, 0, tzinfo=TZ)),
        event(datetime(2024, 5, 1, 10, 0, tzinfo=TZ), datetime(2024, 5, 1, 10, 30, tzinfo=TZ)),
    ]
    assert shortest_interval(records) == 1800


def test_effective_interval_floor():
    assert effective_interval(0) == MINIMUM_INTERVAL
    assert effective_interval(60) == 300
    assert effective_interval(None) == 300
    assert effective_interval(1800) == 1800


def test_time_offset_ignores_date_and_zone():
    assert time_offset(datetime(2024, 5, 1, 10, 30, tzinfo=TZ), datetime(2024, 5, 3, 9, 0)) == 5400
    assert time_offset(time(9, 0), time(10, 0)) == -3600
    assert time_offset(time(9, 0, 30), time(9, 0)) == 30


def test_day_offset():
    assert day_offset(datetime(2024, 5, 3, 23, 0, tzinfo=TZ), datetime(2024, 5, 1, 8, 0, tzinfo=TZ)) == 2
    assert day_offset(datetime(2024, 5, 1, 0, 5, tzinfo=TZ), datetime(2024, 5, 1, 23, 55, tzinfo=TZ)) == 0
    assert day_offset(date(2024, 5, 1), date(2024, 4, 30)) == 1


class TestTicks:
    def test_pixels_per_second(self):
        assert pixels_per_second(3000) == pytest.approx(0.025)
        # Clamped to the 5 minute floor
        assert pixels_per_second(0) == pytest.approx(75 / 300)

    def test_default_tick(self):
        assert tick_interval(300) == 300

    def test_tick_grows_in_five_minute_steps(self):
        # 75px per 3000s: 900s is 22.5px, 1200s is 30px
        assert tick_interval(3000) == 1200

    def test_taller_cards_need_smaller_ticks(self):
        assert tick_interval(3000, minimum_card_height=150) == 600

    def test_suggested_start(self):
        assert tick_interval(300, suggested=900) == 900

    @pytest.mark.parametrize("kwargs", [
        {"minimum_card_height": 0},
        {"minimum_card_height": -75},
        {"minimum_tick_height": 0},
        {"suggested": 0},
    ])
    def test_non_positive_sizes_rejected(self, kwargs):
        with pytest.raises(ValueError, match="must be positive"):
            tick_interval(1800, **kwargs)

    def test_pixels_per_second_needs_card_height(self):
        with pytest.raises(ValueError):
            pixels_per_second(1800, minimum_card_height=0)

    def test_time_ticks(self):
        assert time_ticks(time(9, 0), time(10, 0), 900) == [
            time(9, 0), time(9, 15), time(9, 30), time(9, 45), time(10, 0),
        ]

    def test_time_ticks_round_up(self):
        assert time_ticks(time(9, 0), time(9, 40), 1800) == [time(9, 0), time(9, 30), time(10, 0)]
