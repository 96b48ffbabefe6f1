"""Tests for habitcore/rating.py."""

from habitcore.rating import performance_status, round_half_up, trend


def test_round_half_up():
    assert round_half_up(2.5) == 3
    assert round_half_up(0.5) == 1
    assert round_half_up(12.5) == 13
    assert round_half_up(91.66) == 92
    assert round_half_up(1.49) == 1
    assert round_half_up(0) == 0


def test_performance_status_thresholds():
    assert performance_status(100) == "excellent"
    assert performance_status(80) == "excellent"
    assert performance_status(79) == "good"
    assert performance_status(60) == "good"
    assert performance_status(59) == "fair"
    assert performance_status(40) == "fair"
    assert performance_status(39) == "poor"
    assert performance_status(0) == "poor"


def test_trend():
    assert trend(60, 40) == "up"
    assert trend(40, 60) == "down"
    assert trend(50, 50) == "same"
