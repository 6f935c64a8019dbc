import asyncio
import json
import logging
import sqlite3
from contextlib import asynccontextmanager
from typing import AsyncIterator, Iterable, Optional

import aiosqlite

from db.connections import connect
from models.domain_models import (
    GameSetup,
    GameState,
    Move,
    MoveStatus,
    PlayerProfile,
    Turn,
)
from utils.time import now_utc, parse_iso, to_iso
from .exceptions import (
    GameAlreadyExists,
    GameNotFound,
    GameOver,
    InvalidMove,
    MoveAlreadySubmitted,
    PlayerAlreadyExists,
    PlayerNotAlive,
    PlayerNotFound,
    TurnMismatch,
    UnexpectedResult,
)
from .game_store import GameStore, GameTransaction, MoveStatusListener

logger = logging.getLogger(__name__)


def _row_to_turn(row) -> Turn:
    return Turn.model_validate_json(row["turn_json"])


class SqliteGameTransaction(GameTransaction):
    """Reads and conditional writes for one game inside an open BEGIN IMMEDIATE."""

    def __init__(self, db: aiosqlite.Connection, session_id: str, game_id: str):
        self.db = db
        self.session_id = session_id
        self.game_id = game_id

    async def get_game_state(self) -> Optional[GameState]:
        return await _load_game_state(self.db, self.session_id, self.game_id)

    async def get_moves(self, turn_number: int) -> list[Move]:
        return await _load_moves(self.db, self.session_id, self.game_id, turn_number)

    async def record_move(self, turn_number: int, move: Move) -> None:
        status = await _load_move_status(self.db, self.session_id, self.game_id, turn_number)
        if status is None:
            raise UnexpectedResult(f"No move status for turn {turn_number} of {self.session_id}/{self.game_id}")
        await _insert_move(self.db, self.session_id, self.game_id, turn_number, move.player_id, move.move, move.timestamp)
        await _mark_moved(self.db, self.session_id, self.game_id, status, move.player_id)

    async def append_turn(self, turn: Turn) -> None:
        cur = await self.db.execute(
            "SELECT current_turn FROM games WHERE session_id = ? AND game_id = ?",
            (self.session_id, self.game_id),
        )
        row = await cur.fetchone()
        if row is None:
            raise GameNotFound(f"Game {self.session_id}/{self.game_id} not found")
        if turn.turn_number != row["current_turn"] + 1:
            raise TurnMismatch(
                f"Cannot append turn {turn.turn_number}: current turn is {row['current_turn']}"
            )

        try:
            await _insert_turn(self.db, self.session_id, self.game_id, turn)
        except sqlite3.IntegrityError as exc:
            # the games row said otherwise; only reachable if something bypassed the lock
            raise UnexpectedResult(
                f"Turn {turn.turn_number} of {self.session_id}/{self.game_id} already exists"
            ) from exc


class SqliteGameStore(GameStore):

    def __init__(self, db_path: str):
        self.db_path = db_path
        self.db: aiosqlite.Connection = None
        # One connection is shared by every coroutine in this process; the lock
        # keeps their BEGIN IMMEDIATE ... COMMIT blocks from interleaving.
        self._tx_lock = asyncio.Lock()
        self._listeners: list[MoveStatusListener] = []
        logger.info(f"[STORE] SqliteGameStore initialized with db_path: {db_path}")

    async def init(self):
        """Open the database connection. Call this after construction."""
        self.db = await connect(self.db_path)
        logger.info(f"[STORE] Database connection established to {self.db_path}")

        async with self.db.execute("SELECT name FROM sqlite_master WHERE type='table'") as cursor:
            tables = await cursor.fetchall()
            if not tables:
                logger.error(f"[STORE] ✗ No tables found! Database may be empty or corrupted")
                raise RuntimeError(f"Database at {self.db_path} has no tables - initialization may have failed")
            logger.info(f"[STORE] Database has {len(tables)} tables: {[t[0] for t in tables]}")

    async def close(self):
        """Close database connection."""
        if self.db:
            await self.db.close()
            self.db = None

    @asynccontextmanager
    async def _write(self) -> AsyncIterator[aiosqlite.Connection]:
        async with self._tx_lock:
            await self.db.execute("BEGIN IMMEDIATE")
            try:
                yield self.db
            except BaseException:
                await self.db.rollback()
                raise
            else:
                await self.db.commit()

    # -------------------------------------------------
    # Lifecycle
    # -------------------------------------------------

    async def create_game(
        self,
        session_id: str,
        game_id: str,
        setup: GameSetup,
        first_turn: Turn,
    ) -> None:
        # Raises: GameAlreadyExists
        logger.info(f"[STORE] Creating game: {session_id}/{game_id} ({setup.game_type.value})")

        async with self._write() as db:
            cur = await db.execute(
                "SELECT 1 FROM games WHERE session_id = ? AND game_id = ?",
                (session_id, game_id),
            )
            if await cur.fetchone():
                raise GameAlreadyExists(f"Game {session_id}/{game_id} already exists")

            await db.execute(
                """
                INSERT INTO games (
                    session_id, game_id, setup_json, current_turn, game_over,
                    current_expires_at, created_at
                ) VALUES (?, ?, ?, -1, 0, NULL, ?)
                """,
                (session_id, game_id, setup.model_dump_json(), to_iso(now_utc())),
            )
            await _insert_turn(db, session_id, game_id, first_turn)

    @asynccontextmanager
    async def transaction(self, session_id: str, game_id: str) -> AsyncIterator[SqliteGameTransaction]:
        async with self._write() as db:
            yield SqliteGameTransaction(db, session_id, game_id)

    # -------------------------------------------------
    # Read-side queries
    # -------------------------------------------------

    async def get_game_state(self, session_id: str, game_id: str) -> Optional[GameState]:
        return await _load_game_state(self.db, session_id, game_id)

    async def get_turn(self, session_id: str, game_id: str, turn_number: int) -> Optional[Turn]:
        cur = await self.db.execute(
            "SELECT turn_json FROM turns WHERE session_id = ? AND game_id = ? AND turn_number = ?",
            (session_id, game_id, turn_number),
        )
        row = await cur.fetchone()
        return _row_to_turn(row) if row else None

    async def get_move_status(self, session_id: str, game_id: str, turn_number: int) -> Optional[MoveStatus]:
        return await _load_move_status(self.db, session_id, game_id, turn_number)

    async def list_moves(self, session_id: str, game_id: str, turn_number: int) -> list[Move]:
        return await _load_moves(self.db, session_id, game_id, turn_number)

    async def list_stalled_games(self, grace_seconds: int) -> list[tuple[str, str, int]]:
        cur = await self.db.execute(
            """
            SELECT session_id, game_id, current_turn, current_expires_at
            FROM games
            WHERE game_over = 0 AND current_expires_at IS NOT NULL
            """
        )
        rows = await cur.fetchall()
        now = now_utc()
        stalled = []
        for r in rows:
            expires_at = parse_iso(r["current_expires_at"])
            if expires_at is not None and (now - expires_at).total_seconds() > grace_seconds:
                stalled.append((r["session_id"], r["game_id"], r["current_turn"]))
        return stalled

    # -------------------------------------------------
    # Move submission (atomic path)
    # -------------------------------------------------

    async def submit_move(
        self,
        session_id: str,
        game_id: str,
        player_id: str,
        turn_number: int,
        move: Optional[int],
    ) -> MoveStatus:
        # Raises: GameNotFound, GameOver, TurnMismatch, PlayerNotAlive, InvalidMove, MoveAlreadySubmitted
        """
        Full submission flow, atomically:
        - validate game, turn and player
        - store the move
        - add the player to the turn's MoveStatus

        Listeners are called after the commit, outside the lock.
        """
        async with self._write() as db:
            cur = await db.execute(
                "SELECT setup_json, current_turn, game_over FROM games WHERE session_id = ? AND game_id = ?",
                (session_id, game_id),
            )
            game = await cur.fetchone()
            if game is None:
                raise GameNotFound(f"Game {session_id}/{game_id} not found")
            if game["game_over"]:
                raise GameOver(f"Game {session_id}/{game_id} is over")
            if game["current_turn"] != turn_number:
                raise TurnMismatch(f"Expected turn {game['current_turn']}, got {turn_number}")

            status = await _load_move_status(db, session_id, game_id, turn_number)
            if status is None:
                raise UnexpectedResult(f"No move status for turn {turn_number} of {session_id}/{game_id}")
            if player_id not in status.alive_player_ids:
                raise PlayerNotAlive(f"Player {player_id} is not alive on turn {turn_number}")

            setup = GameSetup.model_validate_json(game["setup_json"])
            board_size = setup.board_width * setup.board_height
            if move is None or isinstance(move, bool) or not 0 <= move < board_size:
                raise InvalidMove(f"Move {move!r} is outside the {setup.board_width}x{setup.board_height} board")

            if player_id in status.moved_player_ids:
                raise MoveAlreadySubmitted(f"Player {player_id} already moved on turn {turn_number}")

            await _insert_move(db, session_id, game_id, turn_number, player_id, move)
            await _mark_moved(db, session_id, game_id, status, player_id)

        logger.info(
            f"[STORE] Move recorded {session_id}/{game_id} turn={turn_number} player={player_id} "
            f"({len(status.moved_player_ids)}/{len(status.alive_player_ids)})"
        )
        await self._publish(session_id, game_id, status)
        return status

    def add_move_status_listener(self, listener: MoveStatusListener) -> None:
        self._listeners.append(listener)

    async def _publish(self, session_id: str, game_id: str, status: MoveStatus) -> None:
        for listener in list(self._listeners):
            try:
                await listener(session_id, game_id, status)
            except Exception as exc:
                logger.error(
                    f"[STORE] MoveStatus listener {getattr(listener, '__qualname__', listener)} failed "
                    f"for {session_id}/{game_id}: {exc}",
                    exc_info=True,
                )

    # -------------------------------------------------
    # Player directory
    # -------------------------------------------------

    async def create_player(self, profile: PlayerProfile) -> None:
        # Raises: PlayerAlreadyExists
        async with self._write() as db:
            cur = await db.execute(
                "SELECT 1 FROM players WHERE player_id = ?",
                (profile.player_id,),
            )
            if await cur.fetchone():
                raise PlayerAlreadyExists(f"Player {profile.player_id} already exists")

            await db.execute(
                """
                INSERT INTO players (player_id, name, emoji, kind, colour, url, created_at)
                VALUES (?, ?, ?, ?, ?, ?, ?)
                """,
                (
                    profile.player_id,
                    profile.name,
                    profile.emoji,
                    profile.kind,
                    profile.colour,
                    profile.url,
                    to_iso(now_utc()),
                ),
            )

    async def get_player(self, player_id: str) -> PlayerProfile:
        players = await self.get_players([player_id])
        if player_id not in players:
            raise PlayerNotFound(f"Player {player_id} not found")
        return players[player_id]

    async def get_players(self, player_ids: Iterable[str]) -> dict[str, PlayerProfile]:
        ids = list(dict.fromkeys(player_ids))
        if not ids:
            return {}
        placeholders = ",".join("?" for _ in ids)
        cur = await self.db.execute(
            f"SELECT player_id, name, emoji, kind, colour, url FROM players WHERE player_id IN ({placeholders})",
            ids,
        )
        rows = await cur.fetchall()
        return {
            r["player_id"]: PlayerProfile(
                player_id=r["player_id"],
                name=r["name"],
                emoji=r["emoji"],
                kind=r["kind"],
                colour=r["colour"],
                url=r["url"],
            )
            for r in rows
        }


# -------------------------------------------------
# Shared SQL helpers (callers own the transaction)
# -------------------------------------------------

async def _insert_turn(db: aiosqlite.Connection, session_id: str, game_id: str, turn: Turn) -> None:
    await db.execute(
        """
        INSERT INTO turns (session_id, game_id, turn_number, turn_json, started_at, expires_at)
        VALUES (?, ?, ?, ?, ?, ?)
        """,
        (
            session_id,
            game_id,
            turn.turn_number,
            turn.model_dump_json(),
            to_iso(turn.started_at),
            to_iso(turn.expires_at),
        ),
    )
    # a finished game takes no more moves, so its last turn gets no tracker
    if not turn.game_over:
        await db.execute(
            """
            INSERT INTO move_statuses (session_id, game_id, turn_number, alive_player_ids_json, moved_player_ids_json)
            VALUES (?, ?, ?, ?, '[]')
            """,
            (session_id, game_id, turn.turn_number, json.dumps(list(turn.alive_players))),
        )
    await db.execute(
        """
        UPDATE games
        SET current_turn = ?, game_over = ?, current_expires_at = ?
        WHERE session_id = ? AND game_id = ?
        """,
        (
            turn.turn_number,
            1 if turn.game_over else 0,
            to_iso(turn.expires_at),
            session_id,
            game_id,
        ),
    )


async def _insert_move(
    db: aiosqlite.Connection,
    session_id: str,
    game_id: str,
    turn_number: int,
    player_id: str,
    move: Optional[int],
    created_at=None,
) -> None:
    try:
        await db.execute(
            """
            INSERT INTO moves (session_id, game_id, turn_number, player_id, move, created_at)
            VALUES (?, ?, ?, ?, ?, ?)
            """,
            (session_id, game_id, turn_number, player_id, move, to_iso(created_at or now_utc())),
        )
    except sqlite3.IntegrityError as exc:
        raise MoveAlreadySubmitted(f"Player {player_id} already moved on turn {turn_number}") from exc


async def _mark_moved(db: aiosqlite.Connection, session_id: str, game_id: str, status: MoveStatus, player_id: str) -> None:
    if player_id not in status.moved_player_ids:
        status.moved_player_ids.append(player_id)
    await db.execute(
        """
        UPDATE move_statuses SET moved_player_ids_json = ?
        WHERE session_id = ? AND game_id = ? AND turn_number = ?
        """,
        (json.dumps(status.moved_player_ids), session_id, game_id, status.move_number),
    )


async def _load_game_state(db: aiosqlite.Connection, session_id: str, game_id: str) -> Optional[GameState]:
    cur = await db.execute(
        "SELECT setup_json FROM games WHERE session_id = ? AND game_id = ?",
        (session_id, game_id),
    )
    game = await cur.fetchone()
    if game is None:
        return None
    cur = await db.execute(
        "SELECT turn_json FROM turns WHERE session_id = ? AND game_id = ? ORDER BY turn_number",
        (session_id, game_id),
    )
    turns = [_row_to_turn(r) for r in await cur.fetchall()]
    return GameState(
        session_id=session_id,
        game_id=game_id,
        setup=GameSetup.model_validate_json(game["setup_json"]),
        turns=turns,
    )


async def _load_moves(db: aiosqlite.Connection, session_id: str, game_id: str, turn_number: int) -> list[Move]:
    cur = await db.execute(
        """
        SELECT player_id, move, created_at FROM moves
        WHERE session_id = ? AND game_id = ? AND turn_number = ?
        ORDER BY created_at
        """,
        (session_id, game_id, turn_number),
    )
    return [
        Move(
            move_number=turn_number,
            player_id=r["player_id"],
            move=r["move"],
            timestamp=parse_iso(r["created_at"]),
        )
        for r in await cur.fetchall()
    ]


async def _load_move_status(
    db: aiosqlite.Connection, session_id: str, game_id: str, turn_number: int
) -> Optional[MoveStatus]:
    cur = await db.execute(
        """
        SELECT alive_player_ids_json, moved_player_ids_json FROM move_statuses
        WHERE session_id = ? AND game_id = ? AND turn_number = ?
        """,
        (session_id, game_id, turn_number),
    )
    row = await cur.fetchone()
    if row is None:
        return None
    return MoveStatus(
        move_number=turn_number,
        alive_player_ids=json.loads(row["alive_player_ids_json"]),
        moved_player_ids=json.loads(row["moved_player_ids_json"]),
    )
