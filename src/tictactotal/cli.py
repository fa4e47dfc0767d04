from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path
from typing import Optional

from .paths import data_dir
from .search import AlphaBetaPlayer, exhaustive_scored_moves, select_action
from .selfplay import SelfPlayArgs, game_result, parity_name, run_selfplay
from .state import (
    GameState,
    apply_action,
    enumerate_transitions,
    format_board,
    is_terminal,
    parse_board,
    serialize_board,
)
from .tactics import immediate_winning_actions, safe_actions


def _add_board_args(p: argparse.ArgumentParser, stdin: bool = False) -> None:
    help_board = "Board string, 9 digits row-major, 0=empty, e.g. 350420000"
    if stdin:
        help_board += " (omit with --stdin)"
    p.add_argument("--board", required=not stdin, help=help_board)
    p.add_argument("--to-move", choices=["odd", "even"], default="odd", help="Parity to move (default: odd)")
    if stdin:
        p.add_argument(
            "--stdin", action="store_true", help="Read 'BOARD [odd|even]' lines from stdin and stream CSV output"
        )


def build_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(prog="t3", description="Tic-Tac-Total engine CLI")
    sub = p.add_subparsers(dest="cmd")
    p.add_argument("--verbose", "-v", action="store_true", help="Enable verbose logging")
    p.add_argument("--version", action="store_true", help="Print version and exit")
    p.add_argument("--info", action="store_true", help="Print environment and dependency info and exit")

    p_choose = sub.add_parser("choose", help="Choose the engine's move for a board")
    _add_board_args(p_choose, stdin=True)

    p_an = sub.add_parser("analyze", help="Compare pruned and exhaustive root scores")
    _add_board_args(p_an)

    p_tr = sub.add_parser("transitions", help="List legal actions in canonical order")
    _add_board_args(p_tr)

    p_tac = sub.add_parser("tactics", help="List immediate wins and safe actions for side-to-move")
    _add_board_args(p_tac)

    p_play = sub.add_parser("play", help="Let the engine play both sides to the end")
    _add_board_args(p_play)

    p_sp = sub.add_parser("selfplay", help="Export self-play records")
    p_sp.add_argument("--out", type=Path, default=None, help="Output directory (default: $T3_DATA_DIR or ./data)")
    p_sp.add_argument("--games", type=int, default=8, help="Number of games (default: 8)")
    p_sp.add_argument(
        "--random-plies", type=int, default=4, help="Uniform random opening plies per game (default: 4)"
    )
    p_sp.add_argument("--seed", type=int, default=42, help="Seed for the random opening plies (default: 42)")
    p_sp.add_argument("--even-starts", action="store_true", help="Even player moves first")
    p_sp.add_argument(
        "--format",
        choices=["csv", "parquet", "both"],
        default="csv",
        help="Export format: csv (default), parquet, both",
    )
    p_sp.add_argument("--tracking", choices=["none", "mlflow"], default="none", help="Experiment tracking backend")
    p_sp.add_argument(
        "--log-dir", type=Path, default=Path("runs"), help="Directory for tracking logs (mlflow local backend)"
    )
    return p


def _print_info() -> None:
    import importlib.util
    import platform

    print(f"python={sys.version.split()[0]} platform={platform.platform()}")
    for pkg in ["numpy", "pandas", "pyarrow", "mlflow"]:
        spec = importlib.util.find_spec(pkg)
        if spec is None:
            print(f"{pkg}=<not installed>")
        else:
            mod = __import__(pkg)
            print(f"{pkg}={getattr(mod, '__version__', '?')}")


def _read_state(board: str, to_move: str) -> Optional[GameState]:
    try:
        grid = parse_board(board)
    except ValueError as e:
        logging.error("%s", e)
        return None
    return GameState(grid, to_move == "odd")


def _choose_stdin() -> int:
    import csv as _csv

    player = AlphaBetaPlayer()
    w = _csv.writer(sys.stdout)
    w.writerow(["board", "to_move", "column", "row", "move"])
    for line in sys.stdin:
        parts = line.split()
        if not parts:
            continue
        to_move = parts[1] if len(parts) > 1 else "odd"
        if to_move not in ("odd", "even"):
            continue
        try:
            state = GameState(parse_board(parts[0]), to_move == "odd")
        except ValueError:
            continue
        if is_terminal(state):
            continue
        a = player.choose(state)
        w.writerow([serialize_board(state), to_move, a.column, a.row, a.move])
    return 0


def main(argv: list[str] | None = None) -> int:
    parser = build_parser()
    ns = parser.parse_args(argv)
    logging.basicConfig(level=logging.DEBUG if ns.verbose else logging.INFO,
                        format="[%(levelname)s] %(message)s")

    if ns.version:
        try:
            from importlib.metadata import PackageNotFoundError, version as _ver

            print(_ver("tictactotal"))
        except PackageNotFoundError:
            print("unknown")
        return 0
    if ns.info:
        _print_info()
        return 0

    if ns.cmd == "selfplay":
        if ns.games < 0 or ns.random_plies < 0:
            logging.error("--games and --random-plies must be non-negative")
            return 2
        out = run_selfplay(SelfPlayArgs(
            out=ns.out or data_dir(),
            games=ns.games,
            random_plies=ns.random_plies,
            odd_starts=not ns.even_starts,
            seed=ns.seed,
            format=ns.format,
            tracking=ns.tracking == "mlflow",
            log_dir=ns.log_dir,
            verbose=ns.verbose,
            cli_argv=list(argv) if argv is not None else None,
        ))
        logging.info("Exported self-play records to: %s", out)
        return 0

    if ns.cmd == "choose" and ns.stdin:
        return _choose_stdin()

    if ns.cmd not in ("choose", "analyze", "transitions", "tactics", "play"):
        parser.print_help()
        return 0

    if not ns.board:
        logging.error("--board is required unless --stdin is given")
        return 2
    state = _read_state(ns.board, ns.to_move)
    if state is None:
        return 2

    if ns.cmd == "transitions":
        for a in enumerate_transitions(state):
            print(f"{a.column} {a.row} {a.move}")
        return 0

    if ns.cmd == "tactics":
        logging.info(
            "to_move=%s wins=%s safe=%s",
            ns.to_move,
            [tuple(a) for a in immediate_winning_actions(state)],
            [tuple(a) for a in safe_actions(state)],
        )
        return 0

    if is_terminal(state):
        logging.info("Board is terminal (%s); there is no move to choose.", game_result(state))
        return 0

    player = AlphaBetaPlayer()
    if ns.cmd == "choose":
        scored = player.scored_moves(state)
        a = select_action(scored)
        score = next(s for s, act in scored.items() if act == a)
        logging.info("action=(%d,%d,%d) score=%d nodes=%d", a.column, a.row, a.move, score, player.nodes)
        return 0

    if ns.cmd == "analyze":
        pruned = player.scored_moves(state)
        exact = exhaustive_scored_moves(state)
        for s in sorted(set(pruned) | set(exact)):
            p, e = pruned.get(s), exact.get(s)
            logging.info(
                "score=%d engine=%s exhaustive=%s",
                s,
                tuple(p) if p else None,
                tuple(e) if e else None,
            )
        a = select_action(pruned)
        logging.info("chosen=%s nodes=%d", tuple(a), player.nodes)
        return 0

    # play
    logging.info("start (%s to move):\n%s", parity_name(state.odd_to_move), format_board(state))
    while not is_terminal(state):
        mover = parity_name(state.odd_to_move)
        a = player.choose(state)
        state = apply_action(state, a)
        logging.info("%s plays %d at column=%d row=%d\n%s", mover, a.move, a.column, a.row, format_board(state))
    logging.info("result=%s", game_result(state))
    return 0


if __name__ == "__main__":  # pragma: no cover
    raise SystemExit(main())
