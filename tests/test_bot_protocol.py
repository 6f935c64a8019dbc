"""Tests for the bot's coordinate view and the move request payload."""

import pytest
from pydantic import ValidationError

from models.bot_protocol import MoveResponse
from models.domain_models import GamePlayer, GameSetup, GameType, PlayerProfile, Team, Turn
from services.bot_notifier import (
    build_move_request,
    direction_to_move_index,
    snake_colour,
    to_bot_coord,
)


def make_setup(game_type=GameType.SNEK, size=9, players=None, teams=()):
    return GameSetup(
        game_type=game_type,
        board_width=size,
        board_height=size,
        game_players=players or [GamePlayer(id="bot1", type="bot"), GamePlayer(id="h1")],
        teams=list(teams),
    )


class TestCoordinates:

    def test_body_in_bot_view(self):
        """Cells 12 and 13 of a 9x9 board are (2, 6) and (3, 6) for the bot."""
        setup = make_setup()
        assert to_bot_coord(12, setup).model_dump() == {"x": 2, "y": 6}
        assert to_bot_coord(13, setup).model_dump() == {"x": 3, "y": 6}

    @pytest.mark.parametrize(
        "direction,expected",
        [("up", 31), ("down", 49), ("left", 39), ("right", 41)],
    )
    def test_direction_from_centre(self, direction, expected):
        assert direction_to_move_index(direction, 40, 9, 9) == expected

    def test_direction_off_board_returns_head(self):
        assert direction_to_move_index("up", 4, 9, 9) == 4
        assert direction_to_move_index("left", 36, 9, 9) == 36


class TestMoveRequest:

    def test_snek_payload(self):
        setup = make_setup()
        turn = Turn(
            turn_number=7,
            player_pieces={"bot1": [12, 13, 14], "h1": [40, 41, 42]},
            player_health={"bot1": 90, "h1": 80},
            alive_players=["bot1", "h1"],
            food=[20],
        )
        profiles = {
            "bot1": PlayerProfile(player_id="bot1", name="Slither", kind="bot", colour="#123456", url="http://bot"),
        }

        payload = build_move_request("g1", setup, turn, "bot1", profiles).to_payload()

        assert payload["turn"] == 7
        assert payload["game"]["id"] == "g1"
        assert payload["board"]["width"] == 7
        assert payload["board"]["height"] == 7
        assert payload["board"]["food"] == [{"x": 1, "y": 5}]
        assert [s["id"] for s in payload["board"]["snakes"]] == ["bot1", "h1"]

        you = payload["you"]
        assert you["name"] == "Slither"
        assert you["health"] == 90
        assert you["length"] == 3
        assert you["head"] == you["body"][0] == {"x": 2, "y": 6}
        assert you["customizations"]["color"] == "#123456"
        assert "teamID" not in you

        h1 = payload["board"]["snakes"][1]
        assert h1["name"] == "h1"
        assert h1["customizations"]["color"] == "#FF0000"

    def test_kingsnek_payload_carries_team_fields(self):
        teams = [Team(id="A", color="#00FF00"), Team(id="B", color="#0000FF")]
        players = [
            GamePlayer(id="bot1", type="bot", team_id="A"),
            GamePlayer(id="k1", team_id="A", is_king=True),
            GamePlayer(id="k2", team_id="B", is_king=True),
        ]
        setup = make_setup(GameType.KINGSNEK, players=players, teams=teams)
        turn = Turn(
            turn_number=1,
            player_pieces={"bot1": [12, 11, 10], "k1": [30, 29, 28], "k2": [60, 61, 62]},
            player_health={"bot1": 99, "k1": 99, "k2": 99},
            alive_players=["bot1", "k1", "k2"],
        )

        you = build_move_request("g1", setup, turn, "bot1", {}).to_payload()["you"]

        assert you["teamID"] == "A"
        assert you["isKing"] is False
        assert you["teamKingID"] == "k1"
        assert you["customizations"]["color"] == "#00FF00"

    def test_team_colour_overrides_profile_colour(self):
        setup = make_setup(
            GameType.TEAMSNEK,
            players=[GamePlayer(id="bot1", type="bot", team_id="A"), GamePlayer(id="h1", team_id="B")],
            teams=[Team(id="A", color="#00FF00"), Team(id="B")],
        )
        profiles = {"bot1": PlayerProfile(player_id="bot1", name="b", colour="#ABCDEF")}
        assert snake_colour(setup, "bot1", profiles) == "#00FF00"


class TestMoveResponse:

    def test_extra_keys_are_ignored(self):
        assert MoveResponse.model_validate({"move": "left", "shout": "hi", "latency": 3}).move == "left"

    @pytest.mark.parametrize("payload", [{"move": "north"}, {}, {"move": None}])
    def test_malformed(self, payload):
        with pytest.raises(ValidationError):
            MoveResponse.model_validate(payload)
