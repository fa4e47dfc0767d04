"""
Self-play records: games opened with random plies and finished by the engine.

Each ply becomes one row; rows are written as CSV (and/or Parquet) together
with a manifest describing how they were produced.
"""
from __future__ import annotations

import csv
import hashlib
import importlib.util
import json
import logging
import sys
from collections import Counter
from dataclasses import dataclass
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict, List

import numpy as np

from .paths import git_commit, git_is_dirty
from .search import AlphaBetaPlayer
from .state import GameState, apply_action, enumerate_transitions, is_terminal, is_win, serialize_board
from .tracking import log_summary, tracking_run

RECORDS_VERSION = "1.0.0"

FIELDNAMES = ["game", "ply", "board", "to_move", "column", "row", "move", "chooser", "result"]


@dataclass
class SelfPlayArgs:
    out: Path
    games: int = 8
    random_plies: int = 4
    odd_starts: bool = True
    seed: int = 42
    format: str = "csv"  # one of: "csv", "parquet", "both"
    tracking: bool = False
    log_dir: Path | None = None
    verbose: bool = False
    cli_argv: List[str] | None = None


def parity_name(odd_to_move: bool) -> str:
    return "odd" if odd_to_move else "even"


def game_result(final: GameState) -> str:
    if is_win(final):
        # the side that just moved made the winning line
        return f"{parity_name(not final.odd_to_move)} wins"
    return "tie"


def play_game(start: GameState, rng: np.random.Generator, random_plies: int,
              player: AlphaBetaPlayer | None = None) -> List[Dict[str, Any]]:
    player = player or AlphaBetaPlayer()
    state = start
    rows: List[Dict[str, Any]] = []
    while not is_terminal(state):
        ply = len(rows)
        transitions = enumerate_transitions(state)
        if ply < random_plies:
            actions = list(transitions)
            action = actions[int(rng.integers(len(actions)))]
            chooser = "random"
        else:
            action = player.choose(state)
            chooser = "engine"
        rows.append({
            "ply": ply,
            "board": serialize_board(state),
            "to_move": parity_name(state.odd_to_move),
            "column": action.column,
            "row": action.row,
            "move": action.move,
            "chooser": chooser,
        })
        state = apply_action(state, action)
    result = game_result(state)
    for r in rows:
        r["result"] = result
    return rows


def _sha256_file(path: Path) -> str:
    h = hashlib.sha256()
    with path.open('rb') as f:
        for chunk in iter(lambda: f.read(8192), b''):
            h.update(chunk)
    return h.hexdigest()


def _package_versions() -> Dict[str, str]:
    versions: Dict[str, str] = {}
    for pkg in ["numpy", "pandas", "pyarrow"]:
        if importlib.util.find_spec(pkg) is None:
            continue
        ver = getattr(__import__(pkg), "__version__", None)
        if ver:
            versions[pkg] = ver
    return versions


def _write_csv(path: Path, rows: List[Dict[str, Any]]) -> None:
    with path.open('w', newline='') as f:
        w = csv.DictWriter(f, fieldnames=FIELDNAMES)
        w.writeheader()
        for r in rows:
            w.writerow(r)


def run_selfplay(args: SelfPlayArgs) -> Path:
    fmt = (args.format or "csv").lower()
    if fmt not in {"csv", "parquet", "both"}:
        raise ValueError(f"Unknown export format: {args.format}")
    have_parquet = (importlib.util.find_spec('pandas') is not None
                    and importlib.util.find_spec('pyarrow') is not None)
    if fmt == "parquet" and not have_parquet:
        # user asked only for parquet; fail before writing anything
        raise RuntimeError("Parquet dependencies not available (install pandas and pyarrow). "
                           "Use pip install .[parquet] to enable parquet support.")
    args.out.mkdir(parents=True, exist_ok=True)

    with tracking_run(args.tracking, run_name="selfplay", log_dir=args.log_dir) as tracked:
        rng = np.random.default_rng(args.seed)
        player = AlphaBetaPlayer()
        rows: List[Dict[str, Any]] = []
        results: Counter = Counter()
        for g in range(args.games):
            game_rows = play_game(GameState.blank(args.odd_starts), rng, args.random_plies, player)
            for r in game_rows:
                r["game"] = g
            if game_rows:
                results[game_rows[0]["result"]] += 1
            rows.extend(game_rows)
            logging.info("Game %d/%d finished after %d plies", g + 1, args.games, len(game_rows))

        csv_path = args.out / "t3_games.csv"
        parquet_path = args.out / "t3_games.parquet"
        files: Dict[str, Path] = {}
        if fmt in {"csv", "both"}:
            _write_csv(csv_path, rows)
            files["games_csv"] = csv_path
            logging.info("Wrote %s (%d rows)", csv_path, len(rows))
        if fmt in {"parquet", "both"}:
            if have_parquet:
                import pandas as pd  # type: ignore

                pd.DataFrame(rows, columns=FIELDNAMES).to_parquet(parquet_path)
                files["games_parquet"] = parquet_path
                logging.info("Wrote %s", parquet_path)
            else:
                logging.warning("Parquet dependencies not available; proceeding with CSV only.")

        manifest = {
            "records_version": RECORDS_VERSION,
            "created_at": datetime.now(timezone.utc).isoformat(),
            "args": {
                "games": args.games,
                "random_plies": args.random_plies,
                "odd_starts": args.odd_starts,
                "seed": args.seed,
                "format": fmt,
            },
            "git_commit": git_commit(),
            "git_is_dirty": git_is_dirty(),
            "python": {"python_version": sys.version.split(" ")[0], "packages": _package_versions()},
            "cli_argv": args.cli_argv,
            "row_counts": {"plies": len(rows), "games": args.games},
            "results": dict(sorted(results.items())),
            "files": {k: str(p) for k, p in files.items()},
            "checksums": {k: _sha256_file(p) for k, p in files.items()},
            "parquet_written": "games_parquet" in files,
        }
        manifest_path = args.out / "manifest.json"
        manifest_path.write_text(json.dumps(manifest, indent=2))
        logging.info("Wrote manifest.json")

        if tracked:
            log_summary({**manifest["args"], "plies": len(rows)}, [manifest_path, *files.values()])

    return args.out
