"""Sample window ordering, eviction, conversion and backfill."""

import pytest

from wage_ticker.currency import DisplayUnit, convert
from wage_ticker.errors import EmptyWindow, OutOfOrderSample, SampleContractError
from wage_ticker.models import Sample
from wage_ticker.store import SampleWindow, backfill


def _sample(index: int, value: float = 0.0) -> Sample:
    return Sample(bucket_index=index, time_label=f"b{index}", value=value)


def test_append_requires_strictly_newer_bucket():
    window = SampleWindow(capacity=5)
    window.append(_sample(3))
    with pytest.raises(OutOfOrderSample):
        window.append(_sample(3))
    with pytest.raises(OutOfOrderSample):
        window.append(_sample(1))
    window.append(_sample(7))
    assert [s.bucket_index for s in window] == [3, 7]


def test_window_keeps_only_the_newest_buckets():
    window = SampleWindow(capacity=50)
    for index in range(0, 240, 2):
        window.append(_sample(index))
        assert len(window) <= 50
    assert [s.bucket_index for s in window] == list(range(140, 240, 2))


def test_update_last_only_touches_value():
    window = SampleWindow(capacity=3)
    window.append(_sample(0, 1.0))
    window.append(_sample(1, 2.0))
    window.update_last(2.5)
    assert len(window) == 2
    assert window.last == Sample(bucket_index=1, time_label="b1", value=2.5)
    assert window.samples()[0].value == 1.0


def test_update_last_on_empty_window_is_a_contract_error():
    with pytest.raises(EmptyWindow):
        SampleWindow().update_last(1.0)
    assert issubclass(EmptyWindow, AssertionError)
    assert issubclass(OutOfOrderSample, SampleContractError)


def test_convert_all_matches_per_sample_conversion():
    values = [0.0, 13.0, 57.0, 400.0, 799.0]
    window = SampleWindow(capacity=10)
    for index, value in enumerate(values):
        window.append(_sample(index, value))
    window.convert_all(DisplayUnit.PRIMARY, DisplayUnit.SECONDARY, 7)
    expected = [convert(v, DisplayUnit.PRIMARY, DisplayUnit.SECONDARY, 7) for v in values]
    assert [s.value for s in window] == expected
    assert [s.time_label for s in window] == [f"b{i}" for i in range(5)]


def test_backfill_at_interval_start(office_config):
    window = backfill(office_config, 0, DisplayUnit.PRIMARY, 7)
    assert window.samples() == (Sample(0, "09:00", 0.0),)


def test_backfill_before_interval_start_is_empty(office_config):
    assert len(backfill(office_config, -5, DisplayUnit.PRIMARY, 7)) == 0


def test_backfill_thirty_minutes_in(short_day_config):
    """600 over 300 minutes accrues 2 per minute; buckets 0..30 inclusive."""
    window = backfill(short_day_config, 30.75, DisplayUnit.PRIMARY, 7)
    samples = window.samples()
    assert len(samples) == 31
    assert [s.bucket_index for s in samples] == list(range(31))
    assert [s.value for s in samples] == [round(2.0 * i) for i in range(31)]
    assert samples[0].time_label == "09:00"
    assert samples[-1].time_label == "09:30"


def test_backfill_respects_capacity(office_config):
    window = backfill(office_config, 120, DisplayUnit.PRIMARY, 7, capacity=50)
    indices = [s.bucket_index for s in window]
    assert indices == list(range(71, 121))


def test_backfill_rounds_in_the_active_unit(short_day_config):
    window = backfill(short_day_config, 10, DisplayUnit.SECONDARY, 7)
    assert window.last.value == 2.9  # 20 / 7 = 2.857...
    assert window.samples()[1].value == 0.3  # 2 / 7 = 0.2857...
