"""
Game state model: board representation, legality, transitions, win/tie checks.
Teaching notes:
- The grid is 3x3, row-major, grid[row][column]; 0 is an empty cell.
- One player places odd values (1, 3, 5), the other even values (2, 4, 6).
- Any row, column or diagonal summing to 13 wins for whoever made the last move.
- States are immutable: a transition always builds a fresh grid.
"""
from dataclasses import dataclass
from typing import Dict, List, NamedTuple, Sequence, Tuple, Union

BOARD_SIZE = 3
MAX_MOVE = 6
WIN_TARGET = 13

Grid = Tuple[Tuple[int, ...], ...]

WIN_LINES = (
    ((0, 0), (0, 1), (0, 2)), ((1, 0), (1, 1), (1, 2)), ((2, 0), (2, 1), (2, 2)),
    ((0, 0), (1, 0), (2, 0)), ((0, 1), (1, 1), (2, 1)), ((0, 2), (1, 2), (2, 2)),
    ((0, 0), (1, 1), (2, 2)), ((0, 2), (1, 1), (2, 0)),
)


class InvalidAction(ValueError):
    """Raised when an action is applied to a state that does not allow it."""


class Action(NamedTuple):
    column: int
    row: int
    move: int


def canonical_key(action: Action) -> Tuple[int, int, int]:
    return (action.column, action.row, action.move)


@dataclass(frozen=True)
class GameState:
    """One board configuration plus the parity that moves next.

    ``grid`` is stored as a tuple of tuples, so equality and hashing are
    structural. Nested lists are accepted and frozen on construction.
    """
    grid: Grid
    odd_to_move: bool

    def __post_init__(self):
        if not isinstance(self.grid, tuple) or any(not isinstance(r, tuple) for r in self.grid):
            object.__setattr__(self, 'grid', tuple(tuple(r) for r in self.grid))

    @classmethod
    def blank(cls, odd_to_move: bool = True) -> 'GameState':
        return cls(tuple((0,) * BOARD_SIZE for _ in range(BOARD_SIZE)), odd_to_move)

    def __str__(self) -> str:
        return format_board(self)


def _in_range(value, low: int, high: int) -> bool:
    return isinstance(value, int) and not isinstance(value, bool) and low <= value < high


def is_valid_action(state: GameState, action: Action) -> bool:
    column, row, move = action
    if not (_in_range(column, 0, BOARD_SIZE) and _in_range(row, 0, BOARD_SIZE)):
        return False
    if not _in_range(move, 1, MAX_MOVE + 1):
        return False
    if (move % 2 == 1) != state.odd_to_move:
        return False
    return state.grid[row][column] == 0


def apply_action(state: GameState, action: Action) -> GameState:
    """Return the state reached by playing ``action``; ``state`` is left untouched."""
    if not is_valid_action(state, action):
        raise InvalidAction(f"Chosen action {tuple(action)} is invalid for this state")
    rows = [list(r) for r in state.grid]
    rows[action.row][action.column] = action.move
    return GameState(tuple(tuple(r) for r in rows), not state.odd_to_move)


def legal_move_values(state: GameState) -> Tuple[int, ...]:
    first = 1 if state.odd_to_move else 2
    return tuple(range(first, MAX_MOVE + 1, 2))


def empty_cells(state: GameState) -> List[Tuple[int, int]]:
    return [(r, c) for r in range(BOARD_SIZE) for c in range(BOARD_SIZE) if state.grid[r][c] == 0]


def is_win(state: GameState) -> bool:
    g = state.grid
    for (r1, c1), (r2, c2), (r3, c3) in WIN_LINES:
        if g[r1][c1] + g[r2][c2] + g[r3][c3] == WIN_TARGET:
            return True
    return False


def is_tie(state: GameState) -> bool:
    return not is_win(state) and all(v != 0 for r in state.grid for v in r)


def is_terminal(state: GameState) -> bool:
    return is_win(state) or is_tie(state)


def legal_actions(state: GameState) -> List[Action]:
    """Legal actions of a non-terminal state in canonical (column, row, move) order.

    Cells are scanned row-major, then the candidates are re-sorted; the
    engine's tie-breaking depends on that order. Terminality is not checked.
    """
    candidates: List[Action] = []
    for row, column in empty_cells(state):
        for move in legal_move_values(state):
            candidates.append(Action(column, row, move))
    candidates.sort(key=canonical_key)
    return candidates


def enumerate_transitions(state: GameState) -> Dict[Action, GameState]:
    """Map every legal action to its successor, in canonical action order.

    Terminal states have no transitions.
    """
    if is_terminal(state):
        return {}
    return {action: apply_action(state, action) for action in legal_actions(state)}


def parse_board(text: str) -> Grid:
    """Parse nine digits 0-6 (row-major, optional '/' between rows) into a grid."""
    raw = text.strip().replace('/', '')
    if len(raw) != BOARD_SIZE * BOARD_SIZE or any(c not in '0123456' for c in raw):
        raise ValueError(f"Invalid board string {text!r}. Must be 9 digits of 0-{MAX_MOVE}.")
    cells = [int(c) for c in raw]
    return tuple(tuple(cells[r * BOARD_SIZE:(r + 1) * BOARD_SIZE]) for r in range(BOARD_SIZE))


def serialize_board(board: Union[GameState, Sequence[Sequence[int]]]) -> str:
    grid = board.grid if isinstance(board, GameState) else board
    return ''.join(str(v) for r in grid for v in r)


def format_board(state: GameState) -> str:
    return '\n'.join('[' + ', '.join(str(v) for v in r) + ']' for r in state.grid)
