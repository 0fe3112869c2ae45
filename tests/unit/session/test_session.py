from __future__ import annotations

import base64

import pytest

from skill_sorter.core import ERROR, ROUND1, ROUND2, SUMMARY, Decision
from skill_sorter.deck import is_permutation
from skill_sorter.session import SkillSorterSession
from skill_sorter.snapshot import decode_token

ROUND1_VOTES = {"Connector": (True, 80), "Deep Diver": (False, 10)}
ROUND2_VOTES = {"Connector": (True, 50), "Deep Diver": (True, 0)}


@pytest.fixture()
def session(pair_catalog, scheduler, rng):
    return SkillSorterSession(pair_catalog, scheduler=scheduler, rng=rng)


def _play_round(session, scheduler, votes):
    for _ in range(len(session.deck)):
        card = session.current_item
        assert session.vote(*votes[card.name])
        scheduler.advance(400)


def _play_scenario_a(session, scheduler):
    _play_round(session, scheduler, ROUND1_VOTES)
    assert session.stage == ROUND2
    _play_round(session, scheduler, ROUND2_VOTES)


def test_new_session_starts_round1_with_full_deck(session, pair_catalog):
    assert session.stage == ROUND1
    assert session.current_index == 0
    assert is_permutation(session.deck, pair_catalog)
    assert session.enjoy_map == {} and session.good_map == {}
    assert session.pending_decision is None
    assert session.summary is None


def test_scenario_a_classifies_into_quadrants(session, scheduler):
    _play_scenario_a(session, scheduler)

    assert session.stage == SUMMARY
    summary = session.summary
    assert summary.superpowers == ("Connector",)
    assert summary.burnout == ("Deep Diver",)
    assert summary.growth == ()
    assert summary.avoid == ()
    assert summary.intensity["Connector"].total == 130


def test_scenario_b_restart_resets_everything(session, scheduler, pair_catalog):
    _play_scenario_a(session, scheduler)

    session.restart()

    assert session.stage == ROUND1
    assert session.current_index == 0
    assert session.enjoy_map == {} and session.good_map == {}
    assert session.summary is None
    assert is_permutation(session.deck, pair_catalog)


def test_second_vote_before_advance_is_ignored(session):
    card = session.current_item
    assert session.vote(True, 70)
    assert not session.vote(False, 10)

    assert session.enjoy_map == {card.name: Decision(True, 70.0)}
    assert session.pending_decision == "yes"


def test_vote_without_current_item_is_ignored(session, scheduler):
    _play_scenario_a(session, scheduler)
    assert not session.vote(True, 50)
    assert not session.tap()


def test_advance_with_nothing_pending_is_a_no_op(session):
    assert not session.advance()
    assert session.current_index == 0
    assert session.stage == ROUND1


def test_advance_is_deferred_by_the_post_vote_delay(session, scheduler):
    session.vote(False, 20)

    scheduler.advance(399)
    assert session.pending_decision == "no"
    assert session.current_index == 0

    scheduler.advance(1)
    assert session.pending_decision is None
    assert session.current_index == 1


def test_round1_end_moves_to_round2_at_index_zero(session, scheduler):
    _play_round(session, scheduler, ROUND1_VOTES)
    assert session.stage == ROUND2
    assert session.current_index == 0
    assert session.progress(ROUND1) == 1.0
    assert session.progress(ROUND2) == 0.0


def test_progress_and_remaining_count(session, scheduler):
    assert session.remaining_count == 1
    session.vote(True, 0)
    assert session.progress(ROUND1) == 0.5
    scheduler.advance(400)
    assert session.remaining_count == 0


def test_restart_cancels_stale_advance(session, scheduler):
    session.vote(True, 90)
    session.restart()

    scheduler.advance(1000)

    assert session.stage == ROUND1
    assert session.current_index == 0
    assert session.pending_decision is None
    assert session.enjoy_map == {}


def test_manual_advance_cancels_scheduled_advance(session, scheduler):
    session.vote(True, 10)
    scheduler.advance(200)
    assert session.advance()
    assert session.current_index == 1

    session.vote(False, 10)
    scheduler.advance(250)  # the first vote's timer would have fired here

    assert session.pending_decision == "no"
    assert session.current_index == 1


def test_auto_advance_can_be_disabled(pair_catalog, scheduler, rng):
    s = SkillSorterSession(pair_catalog, scheduler=scheduler, rng=rng, auto_advance=False)
    s.vote(True, 10)
    scheduler.advance(5000)
    assert s.pending_decision == "yes"
    assert s.advance()
    assert s.current_index == 1


def test_intensity_is_clamped(session):
    card = session.current_item
    session.vote(True, 250)
    assert session.enjoy_map[card.name].intensity == 100.0


def test_observers_are_notified_and_can_unsubscribe(session, scheduler):
    seen = []
    unsubscribe = session.subscribe(lambda s: seen.append((s.stage, s.current_index, s.pending_decision)))

    session.vote(True, 1)
    scheduler.advance(400)
    unsubscribe()
    session.vote(True, 1)

    assert seen == [(ROUND1, 0, "yes"), (ROUND1, 1, None)]


def test_scenario_c_snapshot_drops_unknown_names(catalog, scheduler, raw_token):
    token = raw_token({"superpowers": ["Connector"], "growth": [], "burnout": [], "avoid": ["Ghost"]})

    s = SkillSorterSession(catalog, token=token, scheduler=scheduler)

    assert s.stage == SUMMARY
    assert s.summary.superpowers == ("Connector",)
    assert s.summary.avoid == ()
    assert s.warnings == ("UNKNOWN_SKILL:Ghost",)
    assert s.current_item is None


def test_scenario_d_missing_key_routes_to_error(catalog, scheduler, raw_token):
    token = raw_token({"superpowers": ["Connector"], "burnout": [], "avoid": []})
    logs = []

    s = SkillSorterSession(catalog, token=token, scheduler=scheduler, logger=logs.append)

    assert s.stage == ERROR
    assert s.summary is None
    assert s.summary_override is None
    assert any("growth" in line for line in logs)


def test_error_stage_recovers_via_restart(catalog, scheduler):
    s = SkillSorterSession(catalog, token="%%%", scheduler=scheduler)
    assert s.stage == ERROR

    s.restart()

    assert s.stage == ROUND1
    assert s.current_item is not None


def test_failed_ingest_leaves_no_partial_override(catalog, scheduler, raw_token):
    good = raw_token({"superpowers": ["Connector"], "growth": [], "burnout": [], "avoid": []})
    s = SkillSorterSession(catalog, token=good, scheduler=scheduler)
    assert s.summary_override is not None

    assert s.ingest(raw_token({"superpowers": ["Connector"]})) == ERROR
    assert s.summary_override is None
    assert s.summary is None


def test_ingest_mid_walk_cancels_pending_advance(session, scheduler, raw_token):
    session.vote(True, 50)
    session.ingest(raw_token({"superpowers": [], "growth": ["Deep Diver"], "burnout": [], "avoid": []}))

    scheduler.advance(1000)

    assert session.stage == SUMMARY
    assert session.pending_decision is None
    assert session.summary.growth == ("Deep Diver",)


def test_location_supplies_token_and_restart_strips_it(catalog, scheduler, raw_token):
    token = raw_token({"superpowers": ["Connector"], "growth": [], "burnout": [], "avoid": []})
    s = SkillSorterSession(catalog, location=f"https://example.org/app?ref=mail&data={token}", scheduler=scheduler)
    assert s.stage == SUMMARY

    assert s.restart() == "https://example.org/app?ref=mail"
    assert s.location == "https://example.org/app?ref=mail"


def test_share_url_round_trips_the_finished_summary(session, scheduler, pair_catalog):
    _play_scenario_a(session, scheduler)

    url = session.share_url("https://example.org/app?old=1")

    assert url.startswith("https://example.org/app?data=")
    decoded = decode_token(url.split("data=", 1)[1], pair_catalog)
    assert decoded.summary.superpowers == ("Connector",)
    assert decoded.summary.intensity_of("Connector").enjoy == 80


def test_share_url_is_none_before_summary(session):
    assert session.share_url("https://example.org/app") is None
    assert session.share_token() is None


def test_deeply_nested_token_routes_to_error(catalog, scheduler):
    token = base64.urlsafe_b64encode(b"[" * 100_000).decode("ascii").rstrip("=")

    s = SkillSorterSession(catalog, token=token, scheduler=scheduler)

    assert s.stage == ERROR
    assert s.summary is None


@pytest.mark.parametrize("query", ["?data=", "?data=%20%20", "?ref=mail&data="])
def test_empty_data_parameter_starts_a_fresh_session(catalog, scheduler, query):
    s = SkillSorterSession(catalog, location=f"https://example.org/app{query}", scheduler=scheduler)

    assert s.stage == ROUND1
    assert s.current_item is not None
    assert s.warnings == ()
