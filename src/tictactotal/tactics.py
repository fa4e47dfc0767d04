"""
Tactics and simple motifs: immediate wins, handing the opponent a win, safe moves.
Teaching notes:
- These one-ply checks explain most engine choices late in a game.
"""
from typing import List

from .state import Action, GameState, apply_action, enumerate_transitions, is_valid_action, is_win


def immediate_winning_actions(state: GameState) -> List[Action]:
    return [a for a, nxt in enumerate_transitions(state).items() if is_win(nxt)]


def gives_opponent_immediate_win(state: GameState, action: Action) -> bool:
    if not is_valid_action(state, action):
        return False
    nxt = apply_action(state, action)
    if is_win(nxt):
        return False
    return len(immediate_winning_actions(nxt)) > 0


def safe_actions(state: GameState) -> List[Action]:
    safe: List[Action] = []
    for a, nxt in enumerate_transitions(state).items():
        if is_win(nxt):
            continue
        if immediate_winning_actions(nxt):
            continue
        safe.append(a)
    return safe
