from models.domain_models import GameSetup, GameType
from stores.exceptions import InvalidGameSetup
from .teamsnek import TeamSnekProcessor


class KingSnekProcessor(TeamSnekProcessor):
    """Team snek where every team has one king; when the king dies, so does the team."""

    game_type = GameType.KINGSNEK

    @classmethod
    def validate_setup(cls, setup: GameSetup) -> None:
        super().validate_setup(setup)
        teams = {gp.team_id for gp in cls.filter_active_players(setup)}
        for team_id in sorted(teams):
            kings = [gp.id for gp in setup.game_players if gp.team_id == team_id and gp.is_king]
            if len(kings) != 1:
                raise InvalidGameSetup(f"Team {team_id} must have exactly one king, found {len(kings)}")

    def extra_eliminations(self, pieces, dead):
        fallen = set()
        for pid in dead:
            gp = self.setup.player(pid)
            if gp is None or not gp.is_king:
                continue
            for member in self.setup.team_members(gp.team_id):
                if member in pieces and member not in dead:
                    fallen.add(member)
        return fallen
