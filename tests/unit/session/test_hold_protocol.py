import pytest

from skill_sorter.core import LEFT, RIGHT, ROUND1, Decision
from skill_sorter.session import SkillSorterSession


@pytest.fixture()
def session(pair_catalog, scheduler, rng):
    return SkillSorterSession(pair_catalog, scheduler=scheduler, rng=rng)


def test_hold_then_release_commits_power_as_intensity(session, scheduler):
    card = session.current_item

    assert session.press(RIGHT)
    scheduler.advance(500)

    assert session.release(RIGHT)
    assert session.enjoy_map[card.name] == Decision(True, 50.0)
    assert session.pending_decision == "yes"
    assert not session.is_pressing


def test_long_hold_saturates_at_full_power(session, scheduler):
    card = session.current_item
    session.press(LEFT)
    scheduler.advance(2500)
    session.release(LEFT)

    assert session.enjoy_map[card.name] == Decision(False, 100.0)


def test_live_level_follows_sampling_ticks(session, scheduler):
    session.press(RIGHT)
    scheduler.advance(100)  # last tick at 96 ms

    assert session.is_pressing
    assert session.press_direction == RIGHT
    assert session.live_power_level == pytest.approx(9.6)


def test_first_direction_owns_the_hold(session, scheduler):
    card = session.current_item
    session.press(RIGHT)

    assert not session.press(LEFT)
    scheduler.advance(300)
    assert not session.release(LEFT)
    assert session.is_pressing

    assert session.release(RIGHT)
    assert session.enjoy_map[card.name].yes is True


def test_press_is_rejected_while_a_decision_is_pending(session):
    session.vote(True, 20)
    assert not session.press(RIGHT)
    assert not session.is_pressing


def test_tap_during_hold_cancels_the_hold(session, scheduler):
    card = session.current_item
    session.press(LEFT)
    scheduler.advance(200)

    assert session.tap()
    assert session.enjoy_map[card.name] == Decision(True, 0.0)
    assert not session.release(LEFT)


def test_restart_during_hold_records_nothing(session, scheduler):
    session.press(RIGHT)
    scheduler.advance(300)
    session.restart()
    scheduler.advance(300)

    assert not session.release(RIGHT)
    assert session.enjoy_map == {}
    assert session.stage == ROUND1
    assert scheduler.pending_count == 0


def test_tap_is_a_zero_intensity_yes(session):
    card = session.current_item
    assert session.tap()
    assert session.enjoy_map[card.name] == Decision(True, 0.0)
