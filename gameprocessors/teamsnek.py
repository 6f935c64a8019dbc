from models.domain_models import GamePlayer, GameSetup, GameType, Winner
from stores.exceptions import InvalidGameSetup
from .snek import SnekProcessor


class TeamSnekProcessor(SnekProcessor):
    """
    Snek played in teams. Players without a team only observe.

    A team is out once every member is dead; the game ends when at most one
    team still has a living member, and every member of that team wins.
    """

    game_type = GameType.TEAMSNEK
    min_players = 2

    @classmethod
    def filter_active_players(cls, setup: GameSetup) -> list[GamePlayer]:
        return [gp for gp in setup.game_players if gp.team_id is not None]

    @classmethod
    def validate_setup(cls, setup: GameSetup) -> None:
        super().validate_setup(setup)
        teams = {gp.team_id for gp in cls.filter_active_players(setup)}
        if len(teams) < 2:
            raise InvalidGameSetup(f"{setup.game_type.value} needs players on at least 2 teams")

    def _team_of(self, player_id: str):
        gp = self.setup.player(player_id)
        return gp.team_id if gp else None

    def outcome(self, survivors, scores):
        teams_alive = {self._team_of(pid) for pid in survivors}
        if len(teams_alive) > 1:
            return False, []
        if not teams_alive:
            return True, []
        (team_id,) = teams_alive
        winners = [
            Winner(player_id=pid, score=scores.get(pid, 0) if pid in survivors else 0)
            for pid in self.setup.team_members(team_id)
        ]
        return True, winners
