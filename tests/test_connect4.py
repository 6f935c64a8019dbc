"""Tests for the piece-drop rules."""

import pytest

from gameprocessors.connect4 import Connect4Processor
from models.domain_models import GamePlayer, GameSetup, GameType, Move


@pytest.fixture
def processor():
    setup = GameSetup(
        game_type=GameType.CONNECT4,
        board_width=7,
        board_height=6,
        game_players=[GamePlayer(id="a"), GamePlayer(id="b")],
    )
    return Connect4Processor(setup, "c4-game")


def play(processor, turn, **moves):
    """Apply one turn where `moves` maps player id -> column."""
    batch = [Move(move_number=turn.turn_number, player_id=pid, move=col) for pid, col in moves.items()]
    return processor.apply_moves(turn, batch)


class TestInitialize:

    def test_empty_board_and_bottom_row_allowed(self, processor):
        turn = processor.initialize()
        assert turn.turn_number == 0
        assert turn.alive_players == ["a", "b"]
        assert turn.player_pieces == {"a": [], "b": []}
        assert turn.allowed_moves["a"] == [35, 36, 37, 38, 39, 40, 41]
        assert not turn.game_over


class TestDrops:

    def test_disc_falls_to_lowest_empty_cell(self, processor):
        turn = play(processor, processor.initialize(), a=3)
        assert turn.turn_number == 1
        assert turn.player_pieces["a"] == [38]
        # the move index only selects the column
        turn = play(processor, turn, a=3 + 7)
        assert turn.player_pieces["a"] == [38, 31]

    def test_same_column_stacks_in_setup_order(self, processor):
        turn = play(processor, processor.initialize(), b=0, a=0)
        assert turn.player_pieces["a"] == [35]
        assert turn.player_pieces["b"] == [28]

    def test_full_column_is_rejected(self, processor):
        """A drop into a full column changes nothing and is recorded as a clash."""
        turn = processor.initialize()
        for _ in range(3):
            turn = play(processor, turn, a=0, b=0)
        assert sorted(turn.player_pieces["a"] + turn.player_pieces["b"]) == [0, 7, 14, 21, 28, 35]
        assert 0 not in turn.allowed_moves["a"]
        assert turn.allowed_moves["a"][0] == 36

        before = list(turn.player_pieces["a"])
        turn = play(processor, turn, a=0, b=1)
        assert turn.player_pieces["a"] == before
        assert turn.player_pieces["b"][-1] == 36
        assert len(turn.clashes) == 1
        assert turn.clashes[0].reason == "column_full"
        assert turn.clashes[0].player_ids == ["a"]
        assert not turn.game_over

    def test_pass_changes_nothing(self, processor):
        turn = processor.initialize()
        nxt = processor.apply_moves(turn, [Move(move_number=0, player_id="a", move=None)])
        assert nxt.player_pieces == {"a": [], "b": []}
        assert processor.default_move(turn, "a") is None


class TestWinning:

    def test_four_in_a_row_wins(self, processor):
        turn = processor.initialize()
        turn = play(processor, turn, a=0, b=6)
        turn = play(processor, turn, a=1, b=5)
        turn = play(processor, turn, a=2, b=6)
        assert not turn.game_over
        turn = play(processor, turn, a=3, b=5)

        assert turn.game_over
        assert [w.player_id for w in turn.winners] == ["a"]
        assert turn.winners[0].winning_squares == [35, 36, 37, 38]
        assert all(cells == [] for cells in turn.allowed_moves.values())

    def test_moves_for_other_turns_are_ignored(self, processor):
        turn = processor.initialize()
        nxt = processor.apply_moves(turn, [Move(move_number=5, player_id="a", move=0)])
        assert nxt.player_pieces["a"] == []
