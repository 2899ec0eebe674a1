from __future__ import annotations

import pytest

from telemetry_node.domain.numeric import parse_float, parse_int, round_half_away, truncate
from telemetry_node.domain.window import TemperatureWindow


def test_empty_window_average_is_absent() -> None:
    window = TemperatureWindow(capacity=32)

    assert window.average() is None
    assert window.samples() == [None] * 32


def test_five_samples_average_only_real_slots() -> None:
    window = TemperatureWindow(capacity=32)
    for v in (20.0, 21.0, 22.0, 23.0, 24.0):
        window.push(v)

    assert window.average() == 22.0


def test_average_is_truncated_not_rounded() -> None:
    window = TemperatureWindow(capacity=32)
    for v in (25.0, 25.0, 25.0, 25.0, 25.45):
        window.push(v)

    # 25.09 would round to 25.1
    assert window.average() == 25.0


def test_window_evicts_oldest_sample() -> None:
    window = TemperatureWindow(capacity=3)
    for v in (10.0, 20.0, 30.0, 40.0):
        window.push(v)

    assert window.samples() == [20.0, 30.0, 40.0]
    assert window.capacity == 3
    assert window.average() == 30.0


def test_zero_samples_are_not_averaged() -> None:
    window = TemperatureWindow(capacity=4)
    window.push(0.0)
    window.push(30.0)

    assert window.average() == 30.0


def test_window_rejects_zero_capacity() -> None:
    with pytest.raises(ValueError):
        TemperatureWindow(capacity=0)


def test_round_half_away_from_zero() -> None:
    assert round_half_away(0.125, 2) == 0.13
    assert round_half_away(-0.125, 2) == -0.13
    assert round_half_away(2.5, 0) == 3.0


def test_truncate_toward_zero() -> None:
    assert truncate(66.666, 2) == 66.66
    assert truncate(-1.99, 1) == -1.9


def test_parse_float_absent_values() -> None:
    assert parse_float(None) is None
    assert parse_float("") is None
    assert parse_float("--") is None
    assert parse_float("nan") is None
    assert parse_float("245,5") == 245.5
    assert parse_int("08") == 8
    assert parse_int("8.5") is None


def test_values_exact_to_the_digit_are_not_pushed_down() -> None:
    # 0.29 * 100 == 28.999... and 1.005 * 100 == 100.499... in binary
    assert truncate(0.29, 2) == 0.29
    assert truncate(0.57, 2) == 0.57
    assert truncate(-0.29, 2) == -0.29
    assert round_half_away(1.005, 2) == 1.01
    assert round_half_away(-1.005, 2) == -1.01


def test_average_of_decimal_samples_keeps_its_digit() -> None:
    window = TemperatureWindow(capacity=32)
    for v in (36.6, 36.6, 36.6):
        window.push(v)

    assert window.average() == 36.6
