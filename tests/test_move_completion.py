"""Tests for the game start path and the move completion detector."""

import pytest

from models.domain_models import GamePlayer, GameSetup, GameType, MoveStatus, Team
from services.game_setup import start_game
from services.move_completion import MoveCompletionDetector
from stores.exceptions import InvalidGameSetup, UnsupportedGameType

SETUP = GameSetup(
    game_type=GameType.CONNECT4,
    board_width=7,
    board_height=6,
    game_players=[GamePlayer(id="a"), GamePlayer(id="b")],
    max_turn_time=20,
)


class TestStartGame:

    @pytest.mark.asyncio
    async def test_turn_zero_and_follow_ups(self, store, dispatcher):
        result = await start_game(store, dispatcher, "s1", "g1", SETUP)

        assert result["reason"] == "started"
        assert result["new_turn_number"] == 0
        assert dispatcher.expirations == [("s1", "g1", 0, 20)]
        assert dispatcher.notifications == [("s1", "g1", 0)]
        assert (await store.get_game_state("s1", "g1")).current_turn.turn_number == 0

    @pytest.mark.asyncio
    async def test_invalid_setup_creates_nothing(self, store, dispatcher):
        bad = SETUP.model_copy(update={"game_players": [GamePlayer(id="a", team_id="nope"), GamePlayer(id="b")]})
        with pytest.raises(InvalidGameSetup):
            await start_game(store, dispatcher, "s1", "g1", bad)

        assert await store.get_game_state("s1", "g1") is None
        assert dispatcher.expirations == []

    @pytest.mark.asyncio
    async def test_unsupported_kind(self, store, dispatcher):
        bad = SETUP.model_copy(update={"game_type": "chess"})
        with pytest.raises(UnsupportedGameType):
            await start_game(store, dispatcher, "s1", "g1", bad)

    @pytest.mark.asyncio
    async def test_kingsnek_roster_problem_surfaces_at_start(self, store, dispatcher):
        setup = GameSetup(
            game_type=GameType.KINGSNEK,
            board_width=9,
            board_height=9,
            game_players=[GamePlayer(id="a", team_id="A"), GamePlayer(id="b", team_id="B", is_king=True)],
            teams=[Team(id="A"), Team(id="B")],
        )
        with pytest.raises(InvalidGameSetup):
            await start_game(store, dispatcher, "s1", "kings", setup)


class TestMoveCompletion:

    @pytest.mark.asyncio
    async def test_advances_once_everyone_moved(self, store, dispatcher):
        MoveCompletionDetector(store, dispatcher).register()
        await start_game(store, dispatcher, "s1", "g1", SETUP)

        await store.submit_move("s1", "g1", "a", 0, 2)
        assert len((await store.get_game_state("s1", "g1")).turns) == 1

        await store.submit_move("s1", "g1", "b", 0, 4)
        state = await store.get_game_state("s1", "g1")
        assert [t.turn_number for t in state.turns] == [0, 1]
        assert state.current_turn.player_pieces == {"a": [37], "b": [39]}
        assert dispatcher.expirations[-1] == ("s1", "g1", 1, 20)
        assert dispatcher.notifications[-1] == ("s1", "g1", 1)

    @pytest.mark.asyncio
    async def test_waiting_status_does_nothing(self, store, dispatcher):
        detector = MoveCompletionDetector(store, dispatcher)
        await start_game(store, dispatcher, "s1", "g1", SETUP)

        status = MoveStatus(move_number=0, alive_player_ids=["a", "b"], moved_player_ids=["a"])
        assert await detector.on_move_status_updated("s1", "g1", status) is None

    @pytest.mark.asyncio
    async def test_duplicate_firing_converges(self, store, dispatcher):
        """Two all-moved notifications for one turn still produce one new turn."""
        detector = MoveCompletionDetector(store, dispatcher)
        await start_game(store, dispatcher, "s1", "g1", SETUP)
        status = MoveStatus(move_number=0, alive_player_ids=["a", "b"], moved_player_ids=["a", "b"])

        first = await detector.on_move_status_updated("s1", "g1", status)
        second = await detector.on_move_status_updated("s1", "g1", status)

        assert first["new_turn_created"] is True
        assert second["new_turn_created"] is False
        assert len((await store.get_game_state("s1", "g1")).turns) == 2
        # turn 0 from the start, turn 1 from the first firing only
        assert [e[2] for e in dispatcher.expirations] == [0, 1]
