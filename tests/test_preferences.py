"""Preference defaults, updates, quiet hours and the channel decision."""

from datetime import datetime

import pytest

from agrinotify.common.clock import FixedClock
from agrinotify.services.notification.preferences import (
    ChannelDecision,
    PreferencesRepository,
    in_quiet_window,
    parse_hhmm,
)


def _minutes(hhmm: str) -> int:
    return parse_hhmm(hhmm)


@pytest.mark.parametrize(
    "now, active",
    [("23:30", True), ("22:00", True), ("05:00", True), ("05:59", True), ("06:00", False), ("10:00", False)],
)
def test_quiet_window_wraps_midnight(now, active):
    assert in_quiet_window("22:00", "06:00", _minutes(now)) is active


def test_quiet_window_same_day():
    assert in_quiet_window("13:00", "15:00", _minutes("14:00"))
    assert not in_quiet_window("13:00", "15:00", _minutes("15:00"))


def test_quiet_window_with_equal_bounds_is_never_active():
    assert not in_quiet_window("08:00", "08:00", _minutes("08:00"))
    assert not in_quiet_window("08:00", "08:00", _minutes("23:00"))


def test_parse_hhmm_rejects_garbage():
    with pytest.raises(ValueError):
        parse_hhmm("25:00")
    with pytest.raises(ValueError):
        parse_hhmm("noon")


def test_defaults_created_on_first_read(session_factory, clock):
    repo = PreferencesRepository(session_factory, clock)
    prefs = repo.get_preferences("farmer-1")
    assert prefs.sms_enabled and prefs.push_enabled and prefs.quiet_hours_enabled
    assert (prefs.quiet_hours_start, prefs.quiet_hours_end) == ("22:00", "06:00")
    assert prefs.notification_level == "ALL"
    assert repo.get_preferences("farmer-1").id == prefs.id


def test_update_keeps_unspecified_fields(session_factory, clock):
    repo = PreferencesRepository(session_factory, clock)
    repo.update_preferences("farmer-1", sms_enabled=False, quiet_hours_start="21:30")
    prefs = repo.update_preferences("farmer-1", push_enabled=False, sms_enabled=None)
    assert prefs.sms_enabled is False
    assert prefs.push_enabled is False
    assert prefs.quiet_hours_start == "21:30"
    assert prefs.quiet_hours_end == "06:00"


def test_update_rejects_bad_values(session_factory, clock):
    repo = PreferencesRepository(session_factory, clock)
    with pytest.raises(ValueError):
        repo.update_preferences("farmer-1", notification_level="LOUD")
    with pytest.raises(ValueError):
        repo.update_preferences("farmer-1", favourite_colour="green")


def test_quiet_hours_follow_local_clock(session_factory):
    clock = FixedClock(datetime(2026, 10, 17, 23, 30))
    repo = PreferencesRepository(session_factory, clock)
    assert repo.is_quiet_hours_active("farmer-1")
    clock.set(datetime(2026, 10, 17, 10, 0))
    assert not repo.is_quiet_hours_active("farmer-1")
    repo.update_preferences("farmer-1", quiet_hours_enabled=False)
    clock.set(datetime(2026, 10, 17, 23, 30))
    assert not repo.is_quiet_hours_active("farmer-1")


def test_default_decision(session_factory, clock):
    repo = PreferencesRepository(session_factory, clock)
    assert repo.should_send("f", is_critical=True, category="order") == ChannelDecision(sms=True, push=True)
    assert repo.should_send("f", is_critical=False, category="order") == ChannelDecision(sms=False, push=True)


def test_mute_suppresses_everything(session_factory, clock):
    repo = PreferencesRepository(session_factory, clock)
    repo.update_preferences("f", notification_level="MUTE")
    assert repo.should_send("f", is_critical=True, category="payment") == ChannelDecision(False, False)


def test_critical_level_drops_non_critical(session_factory, clock):
    repo = PreferencesRepository(session_factory, clock)
    repo.update_preferences("f", notification_level="CRITICAL")
    assert repo.should_send("f", is_critical=False, category="order") == ChannelDecision(False, False)
    assert repo.should_send("f", is_critical=True, category="order") == ChannelDecision(True, True)


def test_category_toggle_only_blocks_non_critical(session_factory, clock):
    repo = PreferencesRepository(session_factory, clock)
    repo.update_preferences("f", payment_alerts=False)
    assert repo.should_send("f", is_critical=False, category="payment") == ChannelDecision(False, False)
    assert repo.should_send("f", is_critical=True, category="payment") == ChannelDecision(True, True)


def test_quiet_hours_hold_back_non_critical_push_only(session_factory):
    repo = PreferencesRepository(session_factory, FixedClock(datetime(2026, 10, 17, 23, 30)))
    assert repo.should_send("f", is_critical=False, category="order") == ChannelDecision(sms=False, push=False)
    assert repo.should_send("f", is_critical=True, category="order") == ChannelDecision(sms=True, push=True)


def test_disabled_channels(session_factory, clock):
    repo = PreferencesRepository(session_factory, clock)
    repo.update_preferences("f", sms_enabled=False)
    assert repo.should_send("f", is_critical=True, category="order") == ChannelDecision(sms=False, push=True)
