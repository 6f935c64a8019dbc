import logging

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

import config
import stores
from routes import games_router, players_router
from services import (
	CeleryTurnDispatcher,
	LocalTurnDispatcher,
	MoveCompletionDetector,
	handle_turn_expiration,
	notify_bots,
	get_dispatcher,
	set_dispatcher,
)

logging.basicConfig(level=logging.INFO, format="%(asctime)s %(levelname)s %(name)s: %(message)s")
logger = logging.getLogger(__name__)

# --- FastAPI setup ---
app = FastAPI()

# --- Middleware ---
app.add_middleware(
	CORSMiddleware,
	allow_origins=config.CORS_ORIGINS,
	allow_methods=["POST", "GET"],
	allow_headers=["*"],
)

# --- Register routes ---
app.include_router(games_router, prefix="/games")
app.include_router(players_router, prefix="/players")


def _build_dispatcher(store):
	if config.TURN_DISPATCHER == "local":
		dispatcher = None

		async def expire(session_id, game_id, turn_number):
			return await handle_turn_expiration(store, dispatcher, session_id, game_id, turn_number)

		async def notify(session_id, game_id, turn_number):
			return await notify_bots(store, session_id, game_id, turn_number)

		dispatcher = LocalTurnDispatcher(expire, notify)
		dispatcher.start()
		return dispatcher
	if config.TURN_DISPATCHER == "celery":
		return CeleryTurnDispatcher()
	raise RuntimeError(f"Unknown TURN_DISPATCHER {config.TURN_DISPATCHER!r} (expected 'celery' or 'local')")


@app.on_event("startup")
async def startup_event():
	store = await stores.init_stores(config.DB_PATH)
	dispatcher = _build_dispatcher(store)
	set_dispatcher(dispatcher)
	MoveCompletionDetector(store, dispatcher).register()
	logger.info(f"Turn pipeline ready (dispatcher={config.TURN_DISPATCHER}, db={config.DB_PATH})")


@app.on_event("shutdown")
async def shutdown_event():
	try:
		dispatcher = get_dispatcher()
	except RuntimeError:
		dispatcher = None
	if isinstance(dispatcher, LocalTurnDispatcher):
		dispatcher.shutdown()
	set_dispatcher(None)
	await stores.close_stores()
