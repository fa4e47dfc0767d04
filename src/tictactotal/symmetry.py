"""
Board symmetries for Tic-Tac-Total.
Teaching notes:
- The 8 symmetries of the square (the dihedral group) map rows, columns and
  diagonals onto rows, columns and diagonals, so they preserve line sums,
  wins and the game value of a position.
- A board is canonicalized as the lexicographically smallest of its images.
- Index maps are precomputed over the flat row-major cell index 0..8.
"""
from typing import Dict, List, Tuple

from .state import BOARD_SIZE, GameState

ALL_SYMS = ['id', 'rot90', 'rot180', 'rot270', 'hflip', 'vflip', 'd1', 'd2']

Cells = Tuple[int, ...]


def _source_cell(kind: str, row: int, column: int) -> Tuple[int, int]:
    """Cell of the original board that lands on (row, column) of the image."""
    n = BOARD_SIZE - 1
    if kind == 'id':
        return row, column
    elif kind == 'rot90':
        return n - column, row
    elif kind == 'rot180':
        return n - row, n - column
    elif kind == 'rot270':
        return column, n - row
    elif kind == 'hflip':
        return row, n - column
    elif kind == 'vflip':
        return n - row, column
    elif kind == 'd1':
        return column, row
    elif kind == 'd2':
        return n - column, n - row
    else:
        raise ValueError(f"Unknown transformation: {kind}")


def sym_index_map(kind: str) -> List[int]:
    mapping: List[int] = []
    for row in range(BOARD_SIZE):
        for column in range(BOARD_SIZE):
            r, c = _source_cell(kind, row, column)
            mapping.append(r * BOARD_SIZE + c)
    return mapping


SYMM_INDEX_MAPS: Dict[str, List[int]] = {k: sym_index_map(k) for k in ALL_SYMS}


def flat_cells(state: GameState) -> Cells:
    return tuple(v for r in state.grid for v in r)


def transform_cells(cells: Cells, kind: str) -> Cells:
    return tuple(cells[i] for i in SYMM_INDEX_MAPS[kind])


def canonical_cells(cells: Cells) -> Cells:
    return min(tuple(cells[i] for i in m) for m in SYMM_INDEX_MAPS.values())
