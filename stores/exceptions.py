"""
Shared exception definitions for the stores and the turn pipeline.

Hierarchy:
- StoreError (base for all store exceptions)
  - GameStoreError (game-specific errors)
- ConfigurationError (bad game setup, raised at game start only)
- TurnLimitExceeded (scheduled processing past the sanity ceiling)

`retryable` is read by the Celery task wrapper: retryable errors are
re-raised for autoretry, the rest are logged and reported as failures.
"""


# =========================
# Base exception
# =========================

class StoreError(Exception):
    """Base exception for all store-related errors."""
    retryable: bool = True


class GameNotFound(StoreError):
    retryable = False


class PlayerNotFound(StoreError):
    retryable = False


class UnexpectedResult(StoreError):
    retryable = True
    #aka, the "how the heck did this happen" exception, such as scenarios that can only occur by breaking ACID


# =========================
# GameStore exceptions
# =========================

class GameStoreError(StoreError):
    """Base exception for game store errors."""
    retryable = True


class GameAlreadyExists(GameStoreError):
    retryable = False


class PlayerAlreadyExists(GameStoreError):
    retryable = False


class TurnMismatch(GameStoreError):
    retryable = False


class MoveAlreadySubmitted(GameStoreError):
    retryable = False


class PlayerNotAlive(GameStoreError):
    retryable = False


class GameOver(GameStoreError):
    retryable = False


class InvalidMove(GameStoreError):
    retryable = False


class InvalidState(GameStoreError):
    retryable = False


# =========================
# Game configuration exceptions
# =========================

class ConfigurationError(Exception):
    """A game setup that can never be played. Raised before Turn 0 exists."""
    retryable = False


class UnsupportedGameType(ConfigurationError):
    retryable = False


class InvalidGameSetup(ConfigurationError):
    retryable = False


# =========================
# Scheduling exceptions
# =========================

class TurnLimitExceeded(Exception):
    retryable = False
