from pathlib import Path

from tictactotal.paths import data_dir, repo_root


def test_repo_root_prefers_cwd_when_no_git_and_no_env(tmp_path: Path, monkeypatch):
    monkeypatch.delenv("T3_REPO_ROOT", raising=False)
    monkeypatch.delenv("T3_DATA_DIR", raising=False)
    monkeypatch.chdir(tmp_path)
    import tictactotal.paths as P

    monkeypatch.setattr(P, "_find_git_root", lambda start: None)

    assert repo_root() == tmp_path
    assert data_dir() == tmp_path / "data"


def test_env_overrides(tmp_path: Path, monkeypatch):
    monkeypatch.setenv("T3_REPO_ROOT", str(tmp_path / "root"))
    assert repo_root() == tmp_path / "root"
    assert data_dir() == tmp_path / "root" / "data"
    monkeypatch.setenv("T3_DATA_DIR", str(tmp_path / "elsewhere"))
    assert data_dir() == tmp_path / "elsewhere"
