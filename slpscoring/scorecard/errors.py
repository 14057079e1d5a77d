from __future__ import annotations


class LoadFailure(Exception):
    """One of the session's initial fetches failed; the session never became ready."""


class LoadSuperseded(LoadFailure):
    """A newer load or close replaced this session before its fetches returned."""


class SubmitFailure(Exception):
    """The server rejected a cell's update or clear and the cell rolled back."""


class DeleteFailure(Exception):
    """A clear hit a score the server had already removed.

    The delete counts as done, so this is logged and never surfaced on the cell.
    """


class SessionNotReady(RuntimeError):
    pass


class UnknownCell(KeyError):
    def __init__(self, player_id: str, hole_number: int):
        super().__init__(f"no cell for player={player_id} hole={hole_number}")
        self.player_id = player_id
        self.hole_number = hole_number


class InvalidScoreInput(ValueError):
    pass


__all__ = [
    "DeleteFailure",
    "InvalidScoreInput",
    "LoadFailure",
    "LoadSuperseded",
    "SessionNotReady",
    "SubmitFailure",
    "UnknownCell",
]
