"""
Optional MLflow tracking for self-play exports.

MLflow is imported only when tracking is requested, so it stays an extra.
Tracking problems are logged and never abort the run being tracked.
"""
from __future__ import annotations

import logging
from contextlib import contextmanager
from pathlib import Path
from typing import Dict, Iterable, Iterator, Optional


@contextmanager
def tracking_run(enabled: bool, run_name: str, log_dir: Optional[Path] = None) -> Iterator[bool]:
    """Yield True while an MLflow run is active, False otherwise."""
    if not enabled:
        yield False
        return
    try:
        import mlflow  # type: ignore

        if log_dir is not None:
            mlflow.set_tracking_uri((log_dir.resolve() / "mlruns").as_uri())
        run = mlflow.start_run(run_name=run_name)
    except Exception as e:
        logging.warning("Tracking disabled: %s: %s", type(e).__name__, e)
        yield False
        return
    with run:
        yield True


def log_summary(params: Dict[str, object], artifacts: Iterable[Path] = ()) -> None:
    try:
        import mlflow  # type: ignore

        if mlflow.active_run() is None:
            return
        mlflow.log_params(params)
        for path in artifacts:
            mlflow.log_artifact(str(path))
    except Exception as e:
        logging.warning("Failed to log tracking summary: %s: %s", type(e).__name__, e)
