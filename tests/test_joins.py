from datetime import time
import pandas as pd
import pytest
from delivery_analytics.transformation.joins import (
    delivery_minutes, is_delivered, is_time_of_day, season_of, time_of_day_to_time, time_slot_start,
    to_time_of_day
)


def _times(values):
    return to_time_of_day(pd.Series(values, dtype='object'))


def test_to_time_of_day_accepts_strings_and_times():
    result = to_time_of_day(pd.Series(['23:50:00', '08:05', time(1, 20), None, '00:10:00.000000'], dtype='object'))
    assert result[0] == pd.Timedelta(hours=23, minutes=50)
    assert result[1] == pd.Timedelta(hours=8, minutes=5)
    assert result[2] == pd.Timedelta(hours=1, minutes=20)
    assert pd.isna(result[3])
    assert result[4] == pd.Timedelta(minutes=10)


def test_to_time_of_day_turns_unparseable_text_into_nat():
    result = _times(['noon', '12:00:00'])
    assert pd.isna(result[0])
    assert result[1] == pd.Timedelta(hours=12)


@pytest.mark.parametrize('value, expected', [
    ('00:00:00', True),
    ('23:59:59', True),
    (time(18, 0), True),
    (None, True),
    ('24:00:00', False),
    ('24:30:00', False),
    (pd.Timedelta(hours=-1), False),
    ('noon', False),
])
def test_is_time_of_day(value, expected):
    assert is_time_of_day(value) is expected


def test_time_of_day_to_time_round_trip():
    assert time_of_day_to_time(pd.Timedelta(hours=23, minutes=50)) == time(23, 50)
    assert time_of_day_to_time(pd.NaT) is None


def test_delivery_minutes_same_time_is_zero():
    minutes = delivery_minutes(_times(['12:00:00']), _times(['12:00:00']))
    assert minutes[0] == 0


def test_delivery_minutes_wraps_past_midnight():
    minutes = delivery_minutes(_times(['23:50:00']), _times(['00:10:00']))
    assert minutes[0] == 20


def test_delivery_minutes_one_minute_before_is_almost_a_day():
    minutes = delivery_minutes(_times(['12:00:00']), _times(['11:59:00']))
    assert minutes[0] == 1439


def test_delivery_minutes_missing_delivery_time_is_null():
    minutes = delivery_minutes(_times(['12:00:00']), _times([None]))
    assert pd.isna(minutes[0])


def test_is_delivered_treats_missing_status_as_not_delivered():
    status = pd.Series(['Delivered', 'Not Delivered', None], dtype='object')
    assert is_delivered(status).tolist() == [True, False, False]


def test_time_slots_partition_the_day():
    hours = [f'{hour:02d}:{minute:02d}:00' for hour in range(24) for minute in (0, 59)]
    slots = time_slot_start(_times(hours))

    assert sorted(slots.unique()) == list(range(0, 24, 2))
    assert slots.value_counts().tolist() == [4] * 12
    assert slots[hours.index('01:59:00')] == 0
    assert slots[hours.index('02:00:00')] == 2
    assert slots[hours.index('23:59:00')] == 22


@pytest.mark.parametrize('month, season', [
    (1, 'Winter'), (3, 'Winter'), (4, 'Spring'), (6, 'Spring'),
    (7, 'Summer'), (8, 'Summer'), (9, 'Winter'), (12, 'Winter'),
])
def test_season_of(month, season):
    assert season_of(pd.Series([month]))[0] == season


def test_every_month_has_exactly_one_season():
    seasons = season_of(pd.Series(range(1, 13)))
    assert seasons.notna().all()
    assert set(seasons) == {'Winter', 'Spring', 'Summer'}
