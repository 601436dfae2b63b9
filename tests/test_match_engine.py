"""
Tests for match sequencing: turns, chases, restarts and misuse.

Run with: pytest tests/test_match_engine.py -v
"""
import copy
from dataclasses import replace

import pytest

from bookcricket.errors import InvalidConfiguration, InvalidStateTransition
from bookcricket.engine.outcomes import DeliveryCategory, categorize
from bookcricket.engine.feedback import FeedbackKind, CrowdReaction
from bookcricket.engine.match_engine import (
    MatchConfig, MatchMode, MatchLength, MatchState, next_state,
)


def play_all(controller, session, count):
    return [controller.submit_delivery(session) for _ in range(count)]


class TestStartMatch:

    def test_solo_starts_with_player1(self, make_controller, solo_config):
        session = make_controller([]).start_match(solo_config)
        assert session.state == MatchState.AWAITING_PLAYER1
        assert session.active_player == 1
        assert session.player2 is None
        assert not session.free_hit_active

    def test_dual_creates_both_players(self, make_controller, dual_config):
        session = make_controller([]).start_match(dual_config)
        assert session.player1.name == "Asha"
        assert session.player2.name == "Ben"
        assert session.target is None

    @pytest.mark.parametrize("overs", [0, -2])
    def test_rejects_bad_overs(self, make_controller, solo_config, overs):
        with pytest.raises(InvalidConfiguration):
            make_controller([]).start_match(replace(solo_config, overs=overs))

    def test_rejects_empty_names(self, make_controller, solo_config, dual_config):
        controller = make_controller([])
        with pytest.raises(InvalidConfiguration):
            controller.start_match(replace(solo_config, p1_name="  "))
        with pytest.raises(InvalidConfiguration):
            controller.start_match(replace(dual_config, p2_name=""))

    def test_solo_does_not_need_player2_name(self, make_controller, solo_config):
        assert make_controller([]).start_match(solo_config).player1.name == "Asha"

    def test_match_length_wickets(self):
        quick = MatchConfig.for_length(MatchMode.SOLO, MatchLength.QUICK, "Asha")
        long = MatchConfig.for_length(MatchMode.SOLO, MatchLength.LONG, "Asha")
        assert (quick.overs, quick.total_wickets) == (2, 1)
        assert (long.overs, long.total_wickets) == (5, 10)
        assert MatchConfig.for_length(MatchMode.SOLO, MatchLength.LONG, "Asha", overs=20).total_balls == 120

    @pytest.mark.parametrize("length, overs", [
        (MatchLength.QUICK, 11),
        (MatchLength.QUICK, 0),
        (MatchLength.LONG, 7),
        (MatchLength.LONG, 1),
    ])
    def test_match_length_limits_overs(self, length, overs):
        with pytest.raises(InvalidConfiguration):
            MatchConfig.for_length(MatchMode.SOLO, length, "Asha", overs=overs)


class TestSoloMatch:

    def test_runs_then_out_ends_match(self, make_controller, solo_config, history):
        controller = make_controller([4, 4, 6, 0])
        session = controller.start_match(solo_config)
        play_all(controller, session, 4)

        assert session.state == MatchState.MATCH_OVER
        assert session.player1.score == 14
        assert session.player1.balls_bowled == 4
        assert session.player1.wickets_lost == 1
        assert session.player1.is_out
        assert [(e.player_name, e.score) for e in history.entries()] == [("Asha", 14)]

    def test_full_over_ends_match(self, make_controller, solo_config):
        controller = make_controller([1, 8, 2, 7, 3, 4, 6])
        session = controller.start_match(solo_config)
        play_all(controller, session, 7)
        assert session.is_over
        assert session.player1.balls_bowled == 6
        assert session.player1.score == 1 + 1 + 2 + 0 + 3 + 4 + 6

    def test_extras_do_not_end_the_over(self, make_controller, solo_config):
        controller = make_controller([1, 1, 1, 1, 1, 8, 9, 8])
        session = controller.start_match(solo_config)
        play_all(controller, session, 8)
        assert session.state == MatchState.AWAITING_PLAYER1
        assert session.player1.balls_bowled == 5
        assert session.balls_remaining == 1

    def test_this_over_rolls_after_six_legal_balls(self, make_controller):
        config = MatchConfig(mode=MatchMode.SOLO, overs=2, total_wickets=1, p1_name="Asha")
        controller = make_controller([1, 8, 1, 1, 1, 1, 1, 2])
        session = controller.start_match(config)
        play_all(controller, session, 7)
        assert [o.short_code for o in session.this_over] == ["1", "Wd", "1", "1", "1", "1", "1"]

        controller.submit_delivery(session)
        assert [o.short_code for o in session.this_over] == ["2"]

    def test_long_match_survives_a_wicket(self, make_controller):
        config = MatchConfig(mode=MatchMode.SOLO, overs=2, total_wickets=10, p1_name="Asha")
        controller = make_controller([0, 0, 4])
        session = controller.start_match(config)
        play_all(controller, session, 3)
        assert session.player1.wickets_lost == 2
        assert not session.player1.is_out
        assert not session.is_over

    def test_final_over_flag_passed_to_generator(self, make_controller):
        config = MatchConfig(mode=MatchMode.SOLO, overs=2, total_wickets=1, p1_name="Asha")
        controller = make_controller([1] * 12)
        session = controller.start_match(config)
        play_all(controller, session, 12)
        flags = [final for final, _ in controller.generator.calls]
        assert flags == [False] * 6 + [True] * 6

    def test_result(self, make_controller, solo_config):
        controller = make_controller([6, 0])
        session = controller.start_match(solo_config)
        play_all(controller, session, 2)
        result = controller.result(session)
        assert result.headline == "INNINGS OVER"
        assert result.winner is None
        assert "6" in result.margin


class TestDualMatch:

    def test_chase_completes_mid_over(self, make_controller, dual_config, history):
        controller = make_controller([1, 1, 2, 2, 2, 2] + [2, 2, 2, 2, 3, 6])
        session = controller.start_match(dual_config)

        play_all(controller, session, 6)
        assert session.state == MatchState.AWAITING_PLAYER2
        assert session.active_player == 2
        assert session.player1.score == 10
        assert session.target == 11

        play_all(controller, session, 5)
        assert session.state == MatchState.MATCH_OVER
        assert session.player2.score == 11
        assert session.player2.balls_bowled == 5
        assert controller.generator.digits == [6]

        result = controller.result(session)
        assert result.winner == "Ben"
        assert "1 balls remaining" in result.margin
        assert [(e.player_name, e.score) for e in history.entries()] == [("Asha", 10), ("Ben", 11)]

    def test_player1_all_out_hands_over(self, make_controller, dual_config):
        controller = make_controller([4, 0])
        session = controller.start_match(dual_config)
        play_all(controller, session, 2)
        assert session.state == MatchState.AWAITING_PLAYER2
        assert session.player1.balls_bowled == 2
        assert not session.free_hit_active
        assert session.this_over == []

    def test_player1_cannot_win_instantly(self, make_controller, dual_config):
        controller = make_controller([6, 6, 6])
        session = controller.start_match(dual_config)
        play_all(controller, session, 3)
        assert session.state == MatchState.AWAITING_PLAYER1

    def test_failed_chase(self, make_controller, dual_config):
        controller = make_controller([4, 4, 4, 0] + [1, 1, 1, 1, 1, 1])
        session = controller.start_match(dual_config)
        play_all(controller, session, 10)
        assert session.is_over
        result = controller.result(session)
        assert result.winner == "Asha"
        assert result.margin == "Won by 6 runs"

    def test_player2_all_out(self, make_controller, dual_config):
        controller = make_controller([4, 0] + [2, 0])
        session = controller.start_match(dual_config)
        play_all(controller, session, 4)
        assert session.is_over
        assert session.player2.is_out
        assert controller.result(session).winner == "Asha"

    def test_tie(self, make_controller, dual_config):
        controller = make_controller([3, 0] + [1, 1, 1, 0])
        session = controller.start_match(dual_config)
        play_all(controller, session, 6)
        assert session.is_over
        result = controller.result(session)
        assert result.is_tie
        assert result.winner is None


class TestFreeHitFlow:

    def test_no_ball_then_zero_is_saved(self, make_controller, solo_config):
        controller = make_controller([9, 0, 0])
        session = controller.start_match(solo_config)

        first = controller.submit_delivery(session)
        assert first.category == DeliveryCategory.NOBALL
        assert session.free_hit_active
        assert session.player1.balls_bowled == 0

        second = controller.submit_delivery(session)
        assert second.category == DeliveryCategory.SAVED
        assert second.score_added == 0
        assert session.player1.balls_bowled == 1
        assert not session.free_hit_active
        assert not session.is_over

        third = controller.submit_delivery(session)
        assert third.category == DeliveryCategory.OUT
        assert session.is_over

    def test_wide_without_free_hit(self, make_controller, solo_config):
        controller = make_controller([8, 0])
        session = controller.start_match(solo_config)
        controller.submit_delivery(session)
        assert not session.free_hit_active
        assert controller.submit_delivery(session).category == DeliveryCategory.OUT

    def test_wide_on_free_hit_keeps_it(self, make_controller, solo_config):
        controller = make_controller([9, 8, 0])
        session = controller.start_match(solo_config)
        play_all(controller, session, 2)
        assert session.free_hit_active
        assert controller.submit_delivery(session).category == DeliveryCategory.SAVED

    def test_dot_on_free_hit_uses_it_up(self, make_controller, solo_config):
        controller = make_controller([9, 7, 0])
        session = controller.start_match(solo_config)
        play_all(controller, session, 2)
        assert not session.free_hit_active
        assert controller.submit_delivery(session).category == DeliveryCategory.OUT


class TestTwoStepDelivery:

    def test_request_holds_outcome_until_commit(self, make_controller, solo_config):
        controller = make_controller([4])
        session = controller.start_match(solo_config)
        outcome = controller.request_delivery(session)
        assert session.delivery_in_flight
        assert session.player1.score == 0

        controller.commit_delivery(session, outcome)
        assert not session.delivery_in_flight
        assert session.player1.score == 4
        assert session.last_outcome == outcome

    def test_second_request_rejected_while_in_flight(self, make_controller, solo_config):
        controller = make_controller([4, 4])
        session = controller.start_match(solo_config)
        controller.request_delivery(session)
        snapshot = copy.deepcopy(session)
        with pytest.raises(InvalidStateTransition):
            controller.request_delivery(session)
        assert session == snapshot

    def test_commit_without_request_rejected(self, make_controller, solo_config):
        controller = make_controller([])
        session = controller.start_match(solo_config)
        with pytest.raises(InvalidStateTransition):
            controller.commit_delivery(session, categorize(4, False))

    def test_double_commit_rejected(self, make_controller, solo_config):
        controller = make_controller([4])
        session = controller.start_match(solo_config)
        outcome = controller.request_delivery(session)
        controller.commit_delivery(session, outcome)
        snapshot = copy.deepcopy(session)
        with pytest.raises(InvalidStateTransition):
            controller.commit_delivery(session, outcome)
        assert session == snapshot

    def test_commit_of_other_outcome_rejected(self, make_controller, solo_config):
        controller = make_controller([1])
        session = controller.start_match(solo_config)
        controller.request_delivery(session)
        snapshot = copy.deepcopy(session)
        with pytest.raises(InvalidStateTransition):
            controller.commit_delivery(session, categorize(6, False))
        assert session == snapshot

    def test_requests_after_match_over_rejected(self, make_controller, solo_config, history):
        controller = make_controller([0, 4])
        session = controller.start_match(solo_config)
        controller.submit_delivery(session)
        snapshot = copy.deepcopy(session)
        with pytest.raises(InvalidStateTransition):
            controller.request_delivery(session)
        assert session == snapshot
        assert len(history) == 1

    def test_request_rejected_when_active_player_all_out(self, make_controller, dual_config):
        controller = make_controller([4])
        session = controller.start_match(dual_config)
        session.player1 = replace(session.player1, wickets_lost=1, is_out=True)
        snapshot = copy.deepcopy(session)
        with pytest.raises(InvalidStateTransition):
            controller.request_delivery(session)
        assert session == snapshot
        assert controller.generator.digits == [4]

    def test_result_before_end_rejected(self, make_controller, solo_config):
        controller = make_controller([])
        session = controller.start_match(solo_config)
        with pytest.raises(InvalidStateTransition):
            controller.result(session)


class TestRestart:

    def test_restart_after_match_over(self, make_controller, dual_config, history):
        controller = make_controller([4, 0, 2, 0])
        session = controller.start_match(dual_config)
        play_all(controller, session, 4)
        assert session.is_over
        before = history.entries()

        controller.restart(session)
        assert session.state == MatchState.AWAITING_PLAYER1
        assert session.active_player == 1
        assert not session.free_hit_active
        for stats in session.players():
            assert stats.score == 0
            assert stats.balls_bowled == 0
            assert stats.wickets_lost == 0
            assert not stats.is_out
            assert stats.delivery_history == []
        assert session.player1.name == "Asha"
        assert session.player2.name == "Ben"
        assert history.entries() == before

    def test_restart_clears_in_flight_delivery(self, make_controller, solo_config):
        controller = make_controller([9, 4])
        session = controller.start_match(solo_config)
        controller.submit_delivery(session)
        controller.request_delivery(session)
        controller.restart(session)
        assert not session.delivery_in_flight
        assert not session.free_hit_active

    def test_restart_with_new_config(self, make_controller, solo_config):
        controller = make_controller([])
        session = controller.start_match(solo_config)
        controller.restart(session, replace(solo_config, overs=5, total_wickets=10))
        assert session.config.total_balls == 30

    def test_restart_with_bad_config_leaves_session(self, make_controller, solo_config):
        controller = make_controller([4])
        session = controller.start_match(solo_config)
        controller.submit_delivery(session)
        snapshot = copy.deepcopy(session)
        with pytest.raises(InvalidConfiguration):
            controller.restart(session, replace(solo_config, overs=0))
        assert session == snapshot


class TestFeedback:

    def test_events_follow_resolution(self, make_controller, dual_config):
        controller = make_controller([6, 0] + [9, 7, 0])
        events = []
        controller.subscribe(events.append)
        session = controller.start_match(dual_config)
        play_all(controller, session, 5)

        kinds = [e.kind for e in events]
        assert kinds[:3] == [FeedbackKind.CLICK, FeedbackKind.DELIVERY_RESOLVED, FeedbackKind.CROWD_REACTION]
        assert kinds.count(FeedbackKind.TURN_CHANGED) == 1
        assert kinds[-1] == FeedbackKind.MATCH_OVER
        assert events[-1].reaction == CrowdReaction.CHEER

        reactions = [e.reaction for e in events if e.kind == FeedbackKind.CROWD_REACTION]
        assert reactions == [
            CrowdReaction.CHEER, CrowdReaction.OOH, CrowdReaction.OOH,
            CrowdReaction.SLOW_CLAP, CrowdReaction.OOH,
        ]

    def test_raising_listener_sees_finished_turn_change(self, make_controller, dual_config):
        controller = make_controller([4, 0, 6])
        seen = []

        def listener(event):
            if event.kind == FeedbackKind.TURN_CHANGED:
                seen.append((session.state, session.active_player, session.free_hit_active, list(session.this_over)))
                raise RuntimeError("listener failed")

        controller.subscribe(listener)
        session = controller.start_match(dual_config)
        controller.submit_delivery(session)
        with pytest.raises(RuntimeError):
            controller.submit_delivery(session)

        assert seen == [(MatchState.AWAITING_PLAYER2, 2, False, [])]
        assert session.state == MatchState.AWAITING_PLAYER2
        assert session.active_player == 2
        assert session.target == 5
        assert not session.delivery_in_flight

        controller.submit_delivery(session)
        assert session.is_over
        assert controller.result(session).winner == "Ben"


class TestNextState:

    def test_solo_transition_ignores_target(self, make_controller, solo_config):
        session = make_controller([]).start_match(solo_config)
        updated = replace(session.player1, score=50, balls_bowled=3)
        assert next_state(session, updated) == MatchState.AWAITING_PLAYER1

    def test_chase_checked_before_turn_over(self, make_controller, dual_config):
        session = make_controller([]).start_match(dual_config)
        session.player1 = replace(session.player1, score=5)
        session.active_player = 2
        session.state = MatchState.AWAITING_PLAYER2
        updated = replace(session.player2, score=6, balls_bowled=2)
        assert next_state(session, updated) == MatchState.MATCH_OVER
