import math

from hypothesis import given, settings, strategies as st

from tictactotal.search import (
    MAX_SIDE,
    MIN_SIDE,
    AlphaBetaPlayer,
    choose_action,
    exhaustive_choice,
    minimax_score,
)
from tictactotal.state import (
    GameState,
    apply_action,
    empty_cells,
    enumerate_transitions,
    is_terminal,
    is_valid_action,
    is_win,
)
from tictactotal.tactics import immediate_winning_actions


@st.composite
def reachable_states(draw, max_empty: int = 4):
    """Random legal playout from a blank board, stopped at ``max_empty`` empty cells or earlier."""
    state = GameState.blank(draw(st.booleans()))
    while len(empty_cells(state)) > max_empty and not is_terminal(state):
        actions = list(enumerate_transitions(state))
        i = draw(st.integers(min_value=0, max_value=len(actions) - 1))
        state = apply_action(state, actions[i])
    return state


@given(reachable_states(max_empty=6))
def test_transitions_valid_and_canonical(state: GameState):
    t = enumerate_transitions(state)
    if is_terminal(state):
        assert t == {}
        return
    keys = list(t)
    assert all(is_valid_action(state, a) for a in keys)
    orders = [(a.column, a.row, a.move) for a in keys]
    assert all(x < y for x, y in zip(orders, orders[1:]))
    for a, nxt in t.items():
        assert nxt.odd_to_move is not state.odd_to_move
        assert not is_valid_action(nxt, a)
        assert nxt == apply_action(state, a)


@settings(max_examples=40, deadline=None)
@given(reachable_states())
def test_pruned_score_equals_exhaustive(state: GameState):
    player = AlphaBetaPlayer()
    for side in (MAX_SIDE, MIN_SIDE):
        r = player.evaluate(state, -math.inf, math.inf, 0, side)
        assert r.score == minimax_score(state, 0, side)


@settings(max_examples=40, deadline=None)
@given(reachable_states())
def test_choice_is_legal_and_matches_exhaustive(state: GameState):
    a = choose_action(state)
    if is_terminal(state):
        assert a is None
        return
    assert a in enumerate_transitions(state)
    assert a == exhaustive_choice(state)


@settings(max_examples=40, deadline=None)
@given(reachable_states())
def test_choice_follows_win_depth_preference(state: GameState):
    if is_terminal(state):
        return
    t = enumerate_transitions(state)
    exact = {act: minimax_score(nxt, 0, MIN_SIDE) for act, nxt in t.items()}
    chosen = exact[choose_action(state)]
    wins = [s for s in exact.values() if s > 0]
    if wins:
        assert chosen == min(wins)
    else:
        assert chosen == max(exact.values())


@settings(max_examples=40, deadline=None)
@given(reachable_states(max_empty=5))
def test_immediate_win_is_taken_first_in_order(state: GameState):
    if is_terminal(state):
        return
    wins = immediate_winning_actions(state)
    if not wins:
        return
    a = choose_action(state)
    assert a == wins[0]
    assert is_win(apply_action(state, a))
