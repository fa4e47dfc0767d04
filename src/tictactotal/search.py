"""
Adversarial search: minimax with alpha-beta pruning over Tic-Tac-Total states.

Score convention (from the perspective of the player the engine chooses for):
- A win scores +(depth + 1); smaller is a faster win.
- A loss scores -(depth + 1).
- A tie scores 0.

Tie-break policy at the root:
- Root actions are scored in canonical order; for each distinct score only the
  first action that produced it is kept.
- Take the smallest positive score (fastest win); if there is none, take the
  maximum score <= 0, i.e. a tie before any loss and, among losses, the least
  negative one.

Children are generated one at a time, so siblings cut off by pruning are never
built. Interior results are kept in a transposition table keyed by the
symmetry-canonical board; entries record whether the stored score is exact or
only a lower/upper bound of the window it was searched with.
"""
import logging
import math
from functools import lru_cache
from typing import Dict, Mapping, NamedTuple, Optional, Tuple

from .state import Action, GameState, apply_action, enumerate_transitions, is_terminal, is_win, legal_actions
from .symmetry import canonical_cells, flat_cells

MAX_SIDE = 0
MIN_SIDE = 1

EXACT, LOWER, UPPER = 0, 1, 2
# nodes closer to the end are cheaper to search than to canonicalize
TABLE_MIN_EMPTY = 3


class SearchResult(NamedTuple):
    score: int
    alpha: float
    beta: float


def terminal_score(node: GameState, depth: int, side: int) -> int:
    if is_win(node):
        return depth + 1 if side == MIN_SIDE else -(depth + 1)
    return 0


def select_action(scored: Mapping[int, Action]) -> Optional[Action]:
    wins = [s for s in scored if s > 0]
    if wins:
        return scored[min(wins)]
    rest = [s for s in scored if s <= 0]
    if rest:
        return scored[max(rest)]
    return None


class AlphaBetaPlayer:
    """Exhaustive alpha-beta player; ``nodes`` counts evaluations of the last search.

    ``use_table=False`` disables the transposition table, leaving plain
    alpha-beta over the canonical move order.
    """

    def __init__(self, use_table: bool = True):
        self.nodes = 0
        self.use_table = use_table
        self.table: Dict[Tuple, Tuple[int, int]] = {}

    def choose(self, state: GameState) -> Optional[Action]:
        """Return the best action from ``state``, or None if ``state`` is terminal.

        Callers are expected to check terminality first; a terminal state
        has no candidate moves, so there is nothing to choose.
        """
        self.nodes = 0
        scored = self.scored_moves(state)
        action = select_action(scored)
        logging.debug("scores=%s chosen=%s nodes=%d", dict(sorted(scored.items())), action, self.nodes)
        return action

    def scored_moves(self, state: GameState) -> Dict[int, Action]:
        """Score every root action, keeping the first action (canonical order) per score."""
        scored: Dict[int, Action] = {}
        self.table.clear()
        alpha, beta = -math.inf, math.inf
        for action, child in enumerate_transitions(state).items():
            result = self.evaluate(child, alpha, beta, 0, MIN_SIDE)
            if result.score not in scored:
                scored[result.score] = action
            # alpha tightens across root siblings; beta starts fresh for each
            alpha = max(alpha, result.alpha)
            beta = math.inf
        return scored

    def evaluate(self, node: GameState, alpha: float, beta: float, depth: int, side: int) -> SearchResult:
        self.nodes += 1
        if is_terminal(node):
            return SearchResult(terminal_score(node, depth, side), alpha, beta)

        key = None
        if self.use_table:
            cells = flat_cells(node)
            if cells.count(0) >= TABLE_MIN_EMPTY:
                key = (canonical_cells(cells), node.odd_to_move, depth, side)
                entry = self.table.get(key)
                if entry is not None:
                    value, bound = entry
                    if bound == EXACT or (bound == LOWER and value >= beta) or (bound == UPPER and value <= alpha):
                        return SearchResult(value, alpha, beta)
        alpha_in, beta_in = alpha, beta

        if side == MAX_SIDE:
            v = -math.inf
            for action in legal_actions(node):
                child = apply_action(node, action)
                v = max(v, self.evaluate(child, alpha, beta, depth + 1, MIN_SIDE).score)
                alpha = max(alpha, v)
                if beta <= alpha:
                    break
        else:
            v = math.inf
            for action in legal_actions(node):
                child = apply_action(node, action)
                v = min(v, self.evaluate(child, alpha, beta, depth + 1, MAX_SIDE).score)
                beta = min(beta, v)
                if beta <= alpha:
                    break

        if key is not None:
            if v <= alpha_in:
                bound = UPPER
            elif v >= beta_in:
                bound = LOWER
            else:
                bound = EXACT
            self.table[key] = (v, bound)
        return SearchResult(v, alpha, beta)


def choose_action(state: GameState) -> Optional[Action]:
    return AlphaBetaPlayer().choose(state)


@lru_cache(maxsize=None)
def minimax_score(state: GameState, depth: int = 0, side: int = MIN_SIDE) -> int:
    """Unpruned minimax score of ``state``; the reference the pruned search must match."""
    transitions = enumerate_transitions(state)
    if not transitions:
        return terminal_score(state, depth, side)
    other = MAX_SIDE if side == MIN_SIDE else MIN_SIDE
    scores = [minimax_score(child, depth + 1, other) for child in transitions.values()]
    return max(scores) if side == MAX_SIDE else min(scores)


def exhaustive_scored_moves(state: GameState) -> Dict[int, Action]:
    scored: Dict[int, Action] = {}
    for action, child in enumerate_transitions(state).items():
        score = minimax_score(child, 0, MIN_SIDE)
        if score not in scored:
            scored[score] = action
    return scored


def exhaustive_choice(state: GameState) -> Optional[Action]:
    return select_action(exhaustive_scored_moves(state))


def clear_cache() -> None:
    minimax_score.cache_clear()
