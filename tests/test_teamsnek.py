"""Tests for the team and king variants of snek."""

import pytest

from gameprocessors.kingsnek import KingSnekProcessor
from gameprocessors.teamsnek import TeamSnekProcessor
from models.domain_models import GamePlayer, GameSetup, GameType, Move, Turn, Team
from utils.board import perimeter_cells

TEAMS = [Team(id="A", color="#00FF00"), Team(id="B", color="#0000FF")]


def make_setup(game_type, players):
    return GameSetup(
        game_type=game_type,
        board_width=7,
        board_height=7,
        game_players=players,
        teams=TEAMS,
    )


def board(bodies):
    return Turn(
        turn_number=3,
        player_pieces={pid: list(body) for pid, body in bodies.items()},
        player_health={pid: 50 for pid in bodies},
        alive_players=list(bodies),
        walls=perimeter_cells(7, 7),
    )


def play(processor, turn, **moves):
    batch = [Move(move_number=turn.turn_number, player_id=pid, move=cell) for pid, cell in moves.items()]
    return processor.apply_moves(turn, batch)


# a1 and a2 are team A, b1 is team B
BODIES = {
    "a1": [24, 25, 26],
    "a2": [10, 9, 8],
    "b1": [38, 39, 40],
}


class TestTeamSnek:

    @pytest.fixture
    def processor(self):
        setup = make_setup(
            GameType.TEAMSNEK,
            [
                GamePlayer(id="a1", team_id="A"),
                GamePlayer(id="a2", team_id="A"),
                GamePlayer(id="b1", team_id="B"),
                GamePlayer(id="watcher"),
            ],
        )
        return TeamSnekProcessor(setup, "teams")

    def test_players_without_team_only_watch(self, processor):
        turn = processor.initialize()
        assert turn.alive_players == ["a1", "a2", "b1"]
        assert "watcher" not in turn.player_pieces

    def test_team_survives_while_one_member_lives(self, processor):
        # a1 turns back into its own neck
        nxt = play(processor, board(BODIES), a1=25, a2=11, b1=31)
        assert nxt.alive_players == ["a2", "b1"]
        assert not nxt.game_over

    def test_last_team_standing_wins(self, processor):
        nxt = play(processor, board(BODIES), a1=25, a2=9, b1=31)
        assert nxt.alive_players == ["b1"]
        assert nxt.game_over
        assert [w.player_id for w in nxt.winners] == ["b1"]

    def test_dead_teammates_share_the_win_with_zero_score(self):
        setup = make_setup(
            GameType.TEAMSNEK,
            [
                GamePlayer(id="a1", team_id="A"),
                GamePlayer(id="b1", team_id="B"),
                GamePlayer(id="b2", team_id="B"),
            ],
        )
        processor = TeamSnekProcessor(setup, "teams")
        turn = board({"a1": [24, 25, 26], "b1": [38, 39, 40], "b2": [8, 9, 10]})
        # a1 bites its neck, b2 runs into the left wall
        nxt = play(processor, turn, a1=25, b1=31, b2=7)

        assert nxt.alive_players == ["b1"]
        assert nxt.game_over
        assert [(w.player_id, w.score) for w in nxt.winners] == [("b1", 3), ("b2", 0)]


class TestKingSnek:

    @pytest.fixture
    def processor(self):
        setup = make_setup(
            GameType.KINGSNEK,
            [
                GamePlayer(id="a1", team_id="A", is_king=True),
                GamePlayer(id="a2", team_id="A"),
                GamePlayer(id="b1", team_id="B", is_king=True),
            ],
        )
        return KingSnekProcessor(setup, "kings")

    def test_dead_king_takes_the_team_down(self, processor):
        """a2 makes a perfectly safe move but falls with its king."""
        nxt = play(processor, board(BODIES), a1=25, a2=11, b1=31)

        assert "a2" not in nxt.alive_players
        assert nxt.alive_players == ["b1"]
        assert nxt.game_over
        assert [w.player_id for w in nxt.winners] == ["b1"]

    def test_dead_subject_does_not_affect_king(self, processor):
        nxt = play(processor, board(BODIES), a1=23, a2=9, b1=31)
        assert nxt.alive_players == ["a1", "b1"]
        assert not nxt.game_over
