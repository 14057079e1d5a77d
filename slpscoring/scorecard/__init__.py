"""Scorecard scoring session: store, edit reconciler and totals."""

from slpscoring.models import Game, Hole, Junk, Player, Score, ScorecardSummary

from .errors import (
    DeleteFailure,
    InvalidScoreInput,
    LoadFailure,
    LoadSuperseded,
    SessionNotReady,
    SubmitFailure,
    UnknownCell,
)
from .events import SessionEvents
from .reconciler import ScoreEditReconciler, parse_gross
from .store import CellState, CellView, Session, SessionState, SessionStore
from .totals import (
    LiveTotals,
    PlayerTotals,
    project_player,
    project_scores,
    project_totals,
)

__all__ = [
    "CellState",
    "CellView",
    "DeleteFailure",
    "Game",
    "Hole",
    "InvalidScoreInput",
    "Junk",
    "LiveTotals",
    "LoadFailure",
    "LoadSuperseded",
    "Player",
    "PlayerTotals",
    "Score",
    "ScoreEditReconciler",
    "ScorecardSummary",
    "Session",
    "SessionEvents",
    "SessionNotReady",
    "SessionState",
    "SessionStore",
    "SubmitFailure",
    "UnknownCell",
    "parse_gross",
    "project_player",
    "project_scores",
    "project_totals",
]
