"""Tests for the host table session."""

import logging

import pytest

from blackjack.game import Phase
from config import AppConfig
from presentation import PresentationCoordinator
from profiles import InMemoryProfileStore, Profile, ProfileSaveError, TableSession


class FailingStore(InMemoryProfileStore):
    """A store whose writes always fail."""

    def save_balance(self, location, new_balance, new_lifetime_collected):
        raise ProfileSaveError("disk full")


@pytest.fixture
def profile():
    """A profile with 100 coins and some history."""
    return Profile(identity="kai", current_balance=100, lifetime_collected=40, location="slot-1")


@pytest.fixture
def make_session(make_machine, scheduler, presentation_config):
    """Factory for a session over a stacked machine."""

    def factory(*draws, store=None, auto_save=False):
        coordinator = PresentationCoordinator(make_machine(*draws), scheduler, presentation_config)
        return TableSession(store or InMemoryProfileStore(), coordinator, auto_save=auto_save)

    return factory


def _play_round(session, scheduler, amount=10, action="stand"):
    coordinator = session.coordinator
    coordinator.start_betting()
    coordinator.deal(amount)
    coordinator.reveal_complete()
    getattr(coordinator, action)()
    for _ in range(20):
        if coordinator.settled:
            break
        coordinator.reveal_complete()
        scheduler.update(1.0)


class TestOpen:
    """Tests for seating a profile."""

    def test_open_seeds_coins(self, make_session, profile):
        """Test the machine balance comes from the profile."""
        session = make_session("10S", "9D", "10C", "7H")
        session.open(profile)

        assert session.machine.coins == 100
        assert session.profile is profile
        assert session.machine.phase is Phase.IDLE

    def test_builds_coordinator_from_config(self):
        """Test a session without a coordinator wires one up."""
        session = TableSession(InMemoryProfileStore(), app_config=AppConfig())
        assert session.machine is session.coordinator.machine
        assert session.machine.coins == 0


class TestSave:
    """Tests for writing balances back."""

    def test_win_grows_lifetime(self, make_session, profile, scheduler):
        """Test gains since the last save add to lifetime collected."""
        session = make_session("10S", "9D", "10C", "7H")
        session.open(profile)
        _play_round(session, scheduler)
        assert session.machine.coins == 110

        assert session.save() is True
        assert session.store.get("slot-1").balance == 110
        assert session.store.get("slot-1").lifetime_collected == 50
        assert session.profile.current_balance == 110
        assert session.profile.lifetime_collected == 50

    def test_loss_keeps_lifetime(self, make_session, profile, scheduler):
        """Test losses never reduce lifetime collected."""
        session = make_session("8S", "9D", "10C", "7H", "5C")
        session.open(profile)
        _play_round(session, scheduler, action="hit")
        assert session.machine.coins == 90

        session.save()
        saved = session.store.get("slot-1")
        assert saved.balance == 90
        assert saved.lifetime_collected == 40

    def test_repeated_save_counts_gain_once(self, make_session, profile, scheduler):
        """Test gains are measured from the last successful save."""
        session = make_session("10S", "9D", "10C", "7H")
        session.open(profile)
        _play_round(session, scheduler)
        session.save()
        session.save()

        assert session.store.get("slot-1").lifetime_collected == 50

    def test_failed_save_logged(self, make_session, profile, caplog):
        """Test store failures are logged and leave the profile untouched."""
        session = make_session("10S", "9D", "10C", "7H", store=FailingStore())
        session.open(profile)
        session.machine.update_coins(150)

        with caplog.at_level(logging.ERROR):
            assert session.save() is False

        assert "Failed to save coins for kai" in caplog.text
        assert session.profile is profile

    def test_save_without_profile(self, make_session):
        """Test nothing is written with no profile seated."""
        session = make_session("10S", "9D", "10C", "7H")
        assert session.save() is False
        assert session.store.saves == []

    def test_auto_save_after_settlement(self, make_session, profile, scheduler):
        """Test each settled round is saved when auto_save is on."""
        session = make_session("10S", "9D", "10C", "7H", auto_save=True)
        session.open(profile)
        _play_round(session, scheduler)
        _play_round(session, scheduler)

        balances = [s.balance for s in session.store.saves]
        assert balances == [110, 120]
        assert session.store.get("slot-1").lifetime_collected == 60

    def test_no_auto_save_by_request(self, make_session, profile, scheduler):
        """Test auto_save=False leaves saving to the host."""
        session = make_session("10S", "9D", "10C", "7H", auto_save=False)
        session.open(profile)
        _play_round(session, scheduler)
        assert session.store.saves == []


class TestSwitchAndClose:
    """Tests for leaving the table."""

    def test_switch_profile(self, make_session, profile, scheduler):
        """Test the old profile is saved before the new one is seated."""
        session = make_session("10S", "9D", "10C", "7H")
        session.open(profile)
        _play_round(session, scheduler)

        other = Profile(identity="rin", current_balance=30, location="slot-2")
        assert session.switch_profile(other) is True

        assert session.store.get("slot-1").balance == 110
        assert session.profile is other
        assert session.machine.coins == 30
        assert session.machine.phase is Phase.IDLE

    def test_switch_mid_round_cancels_steps(self, make_session, profile, scheduler):
        """Test a queued step from the old profile never runs."""
        session = make_session("AS", "KD", "9C", "7H")
        session.open(profile)
        session.coordinator.start_betting()
        session.coordinator.deal(10)
        session.coordinator.reveal_complete()
        assert scheduler.pending == 1

        other = Profile(identity="rin", current_balance=30, location="slot-2")
        session.switch_profile(other)
        scheduler.update(1.0)

        assert session.store.get("slot-1").balance == 90
        assert session.machine.coins == 30
        assert session.machine.result is None
        assert scheduler.pending == 0

    def test_close(self, make_session, profile, scheduler):
        """Test close saves and clears the table."""
        session = make_session("10S", "9D", "10C", "7H")
        session.open(profile)
        _play_round(session, scheduler)

        assert session.close() is True
        assert session.profile is None
        assert session.machine.phase is Phase.IDLE
        assert session.store.get("slot-1").balance == 110
