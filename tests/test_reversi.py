"""Tests for simultaneous reversi on a 4x4 board."""

import pytest

from gameprocessors.reversi import ReversiProcessor
from models.domain_models import GamePlayer, GameSetup, GameType, Move, Turn


@pytest.fixture
def processor():
    setup = GameSetup(
        game_type=GameType.REVERSI,
        board_width=4,
        board_height=4,
        game_players=[GamePlayer(id="a"), GamePlayer(id="b"), GamePlayer(id="c")],
    )
    return ReversiProcessor(setup, "reversi")


def play(processor, turn, **moves):
    batch = [Move(move_number=turn.turn_number, player_id=pid, move=cell) for pid, cell in moves.items()]
    return processor.apply_moves(turn, batch)


class TestOpening:

    def test_centre_four(self, processor):
        turn = processor.initialize()
        assert turn.player_pieces == {"a": [6, 9], "b": [5, 10]}
        assert turn.alive_players == ["a", "b"]

    def test_legal_moves_flank_an_opponent(self, processor):
        turn = processor.initialize()
        assert turn.allowed_moves == {"a": [1, 4, 11, 14], "b": [2, 7, 8, 13]}


class TestMoves:

    def test_flip(self, processor):
        turn = play(processor, processor.initialize(), a=4)
        assert turn.player_pieces["a"] == [4, 5, 6, 9]
        assert turn.player_pieces["b"] == [10]

    def test_earlier_move_can_make_later_move_illegal(self, processor):
        """Moves apply in setup order; b's move no longer flanks anything after a's."""
        turn = play(processor, processor.initialize(), a=4, b=7)
        assert turn.player_pieces["a"] == [4, 5, 6, 9]
        assert turn.player_pieces["b"] == [10]
        assert 7 not in turn.player_pieces["a"]

    def test_move_onto_occupied_cell_is_forfeited(self, processor):
        turn = play(processor, processor.initialize(), a=5)
        assert turn.player_pieces == {"a": [6, 9], "b": [5, 10]}


class TestEnd:

    def test_full_board_ends_the_game(self, processor):
        turn = Turn(
            turn_number=12,
            player_pieces={"a": list(range(9)), "b": list(range(9, 16))},
            alive_players=["a", "b"],
        )
        nxt = processor.apply_moves(turn, [])
        assert nxt.game_over
        assert [(w.player_id, w.score) for w in nxt.winners] == [("a", 9)]

    def test_equal_discs_share_the_win(self, processor):
        turn = Turn(
            turn_number=12,
            player_pieces={"a": list(range(8)), "b": list(range(8, 16))},
            alive_players=["a", "b"],
        )
        nxt = processor.apply_moves(turn, [])
        assert [w.player_id for w in nxt.winners] == ["a", "b"]
