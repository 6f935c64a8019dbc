from models.domain_models import GameSetup, GameType
from stores.exceptions import UnsupportedGameType
from .base import GameProcessor
from .colourclash import ColourClashProcessor
from .connect4 import Connect4Processor
from .kingsnek import KingSnekProcessor
from .longboi import LongboiProcessor
from .reversi import ReversiProcessor
from .snek import SnekProcessor
from .tactictoes import TacticToesProcessor
from .teamsnek import TeamSnekProcessor


PROCESSORS: dict[GameType, type[GameProcessor]] = {
    GameType.CONNECT4: Connect4Processor,
    GameType.LONGBOI: LongboiProcessor,
    GameType.TACTICTOES: TacticToesProcessor,
    GameType.SNEK: SnekProcessor,
    GameType.TEAMSNEK: TeamSnekProcessor,
    GameType.KINGSNEK: KingSnekProcessor,
    GameType.COLOURCLASH: ColourClashProcessor,
    GameType.REVERSI: ReversiProcessor,
}


def get_processor_class(game_type) -> type[GameProcessor]:
    """Look up the rule engine for a game kind.

    Accepts a GameType or its string value.

    Raises:
        UnsupportedGameType: for any kind without a registered processor.
    """
    try:
        kind = GameType(game_type)
    except ValueError:
        raise UnsupportedGameType(f"Unsupported game type: {game_type!r}")
    processor_cls = PROCESSORS.get(kind)
    if processor_cls is None:
        raise UnsupportedGameType(f"Unsupported game type: {game_type!r}")
    return processor_cls


def get_processor(setup: GameSetup, game_id: str = "") -> GameProcessor:
    return get_processor_class(setup.game_type)(setup, game_id)
