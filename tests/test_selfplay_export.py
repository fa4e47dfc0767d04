import csv
import json
from pathlib import Path

import numpy as np
import pytest

import tictactotal.selfplay as SP
from tictactotal.selfplay import SelfPlayArgs, play_game, run_selfplay
from tictactotal.state import Action, GameState, apply_action, is_terminal, parse_board


def test_play_game_from_position_engine_only():
    start = GameState(parse_board("121212200"), True)
    rows = play_game(start, np.random.default_rng(0), random_plies=0)
    assert [(r["column"], r["row"], r["move"]) for r in rows] == [(1, 2, 1), (2, 2, 2)]
    assert [r["to_move"] for r in rows] == ["odd", "even"]
    assert rows[1]["board"] == "121212210"
    assert all(r["chooser"] == "engine" for r in rows)
    assert all(r["result"] == "tie" for r in rows)


def test_random_playout_is_legal_and_ends_terminal():
    rows = play_game(GameState.blank(True), np.random.default_rng(3), random_plies=9)
    assert 1 <= len(rows) <= 9
    assert all(r["chooser"] == "random" for r in rows)
    state = GameState.blank(True)
    for r in rows:
        state = apply_action(state, Action(r["column"], r["row"], r["move"]))
    assert is_terminal(state)
    assert rows[0]["result"] in {"odd wins", "even wins", "tie"}


def test_export_creates_csv_and_manifest(tmp_path: Path):
    out = run_selfplay(SelfPlayArgs(out=tmp_path / "exp", games=2, random_plies=6, seed=7))
    csv_path = out / "t3_games.csv"
    assert csv_path.exists()
    with csv_path.open() as f:
        rows = list(csv.DictReader(f))
    assert rows and set(rows[0]) == set(SP.FIELDNAMES)
    assert {r["game"] for r in rows} <= {"0", "1"}
    for r in rows:
        if int(r["ply"]) < 6:
            assert r["chooser"] == "random"
        else:
            assert r["chooser"] == "engine"
    data = json.loads((out / "manifest.json").read_text())
    assert data["records_version"]
    assert data["row_counts"]["plies"] == len(rows)
    assert sum(data["results"].values()) == 2
    assert data["parquet_written"] is False
    assert set(data["checksums"]) == {"games_csv"}


def test_export_reproducible_with_seed(tmp_path: Path):
    a = run_selfplay(SelfPlayArgs(out=tmp_path / "a", games=2, random_plies=6, seed=11))
    b = run_selfplay(SelfPlayArgs(out=tmp_path / "b", games=2, random_plies=6, seed=11))
    assert (a / "t3_games.csv").read_bytes() == (b / "t3_games.csv").read_bytes()


def test_unknown_format_rejected(tmp_path: Path):
    with pytest.raises(ValueError):
        run_selfplay(SelfPlayArgs(out=tmp_path, games=1, format="xlsx"))


def test_parquet_only_requires_dependencies(tmp_path: Path, monkeypatch):
    real_find_spec = SP.importlib.util.find_spec
    monkeypatch.setattr(
        SP.importlib.util,
        "find_spec",
        lambda name, *a: None if name in ("pandas", "pyarrow") else real_find_spec(name, *a),
    )
    with pytest.raises(RuntimeError):
        run_selfplay(SelfPlayArgs(out=tmp_path / "pq", games=1, format="parquet"))
    assert not (tmp_path / "pq").exists()


def test_parquet_written_when_available(tmp_path: Path):
    pd = pytest.importorskip("pandas")
    pytest.importorskip("pyarrow")
    out = run_selfplay(SelfPlayArgs(out=tmp_path / "both", games=1, random_plies=6, seed=1, format="both"))
    df = pd.read_parquet(out / "t3_games.parquet")
    assert list(df.columns) == SP.FIELDNAMES
    assert json.loads((out / "manifest.json").read_text())["parquet_written"] is True
