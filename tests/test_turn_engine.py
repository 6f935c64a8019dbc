"""Tests for the Turn Engine's at-most-once advance."""

import asyncio

import pytest

from gameprocessors import get_processor
from gameprocessors.connect4 import Connect4Processor
from models.domain_models import GamePlayer, GameSetup, GameType, Turn
from services.turn_engine import advance_turn, stamp_turn
from stores.exceptions import InvalidState

SETUP = GameSetup(
    game_type=GameType.CONNECT4,
    board_width=7,
    board_height=6,
    game_players=[GamePlayer(id="a"), GamePlayer(id="b")],
    max_turn_time=45,
)


async def create(store, game_id="g1", setup=SETUP):
    first = stamp_turn(get_processor(setup, game_id).initialize(), setup)
    await store.create_game("s1", game_id, setup, first)


class TestAdvance:

    @pytest.mark.asyncio
    async def test_all_moves_in(self, store):
        await create(store)
        await store.submit_move("s1", "g1", "a", 0, 0)
        await store.submit_move("s1", "g1", "b", 0, 1)

        result = await advance_turn(store, "s1", "g1", 0)

        assert result["new_turn_created"] is True
        assert result["new_turn_number"] == 1
        assert result["turn_duration_seconds"] == 45
        assert result["reason"] == "advanced"
        turn = await store.get_turn("s1", "g1", 1)
        assert turn.player_pieces == {"a": [35], "b": [36]}
        assert (turn.expires_at - turn.started_at).total_seconds() == 45

    @pytest.mark.asyncio
    async def test_missing_moves_get_defaults(self, store):
        await create(store)
        await store.submit_move("s1", "g1", "a", 0, 0)

        result = await advance_turn(store, "s1", "g1", 0)

        assert result["new_turn_created"]
        turn = await store.get_turn("s1", "g1", 1)
        assert turn.player_pieces == {"a": [35], "b": []}

    @pytest.mark.asyncio
    async def test_second_call_is_a_no_op(self, store):
        await create(store)
        first = await advance_turn(store, "s1", "g1", 0)
        again = await advance_turn(store, "s1", "g1", 0)

        assert first["new_turn_created"]
        assert again["new_turn_created"] is False
        assert again["reason"] == "stale_turn"
        state = await store.get_game_state("s1", "g1")
        assert len(state.turns) == 2

    @pytest.mark.asyncio
    async def test_concurrent_triggers_create_one_turn(self, store):
        """Completion and expiration racing on the same turn: exactly one wins."""
        await create(store)
        results = await asyncio.gather(*(advance_turn(store, "s1", "g1", 0) for _ in range(5)))

        assert sum(1 for r in results if r["new_turn_created"]) == 1
        state = await store.get_game_state("s1", "g1")
        assert [t.turn_number for t in state.turns] == [0, 1]

    @pytest.mark.asyncio
    async def test_unknown_game(self, store):
        result = await advance_turn(store, "s1", "missing", 0)
        assert result["new_turn_created"] is False
        assert result["reason"] == "not_found"

    @pytest.mark.asyncio
    async def test_terminal_turn_never_advances(self, store):
        over = Turn(turn_number=0, alive_players=["a", "b"], game_over=True)
        await store.create_game("s1", "done", SETUP, over)

        result = await advance_turn(store, "s1", "done", 0)
        assert result["new_turn_created"] is False
        assert result["reason"] == "game_over"

    @pytest.mark.asyncio
    async def test_final_turn_has_no_expiry(self, store):
        await create(store)
        for turn_number, column in enumerate(range(4)):
            await store.submit_move("s1", "g1", "a", turn_number, column)
            await store.submit_move("s1", "g1", "b", turn_number, 6 - turn_number % 2)
            result = await advance_turn(store, "s1", "g1", turn_number)

        assert result["game_over"] is True
        assert result["turn_duration_seconds"] is None
        final = await store.get_turn("s1", "g1", 4)
        assert final.game_over
        assert final.expires_at is None


class RevivingProcessor(Connect4Processor):

    def apply_moves(self, current_turn, moves):
        nxt = super().apply_moves(current_turn, moves)
        return nxt.model_copy(update={"alive_players": nxt.alive_players + ["ghost"]})


class TestAliveSet:

    @pytest.mark.asyncio
    async def test_revival_is_rejected_and_nothing_is_written(self, store):
        await create(store)
        with pytest.raises(InvalidState):
            await advance_turn(store, "s1", "g1", 0, processor_factory=RevivingProcessor)

        state = await store.get_game_state("s1", "g1")
        assert len(state.turns) == 1
        assert await store.list_moves("s1", "g1", 0) == []
