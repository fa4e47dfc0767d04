"""tictactotal package.

Game state model and exhaustive alpha-beta engine for Tic-Tac-Total, plus a
small CLI and self-play record export.

Convenience imports are exposed for common workflows.
"""

from .search import AlphaBetaPlayer, choose_action
from .state import (
    Action,
    GameState,
    InvalidAction,
    apply_action,
    enumerate_transitions,
    is_terminal,
    is_tie,
    is_valid_action,
    is_win,
    legal_move_values,
)

__all__ = [
    "Action",
    "AlphaBetaPlayer",
    "GameState",
    "InvalidAction",
    "apply_action",
    "choose_action",
    "enumerate_transitions",
    "is_terminal",
    "is_tie",
    "is_valid_action",
    "is_win",
    "legal_move_values",
]
