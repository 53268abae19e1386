"""Export of session results and snapshots.

- Result tables are written as CSV with a header row.
- Agents, value functions, policies and arms expose ``snapshot()``; the
  snapshots are written as JSON for inspection. They are not meant to be
  loaded back into live objects.
- ``TrainTest`` configurations round-trip through JSON.
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any, Optional, Union

import numpy as np
import pandas as pd

from .sessions import COLUMNS, TrainTest

PathLike = Union[str, Path]


def results_to_csv(results: pd.DataFrame, path: Optional[PathLike] = None) -> Optional[str]:
    """
    Write a session result table as CSV.

    Parameters
    ----------
    results : pandas.DataFrame
        Table produced by ``TrainTest.call`` or ``TrainTest.par_call``.
    path : str or Path, optional
        Destination file. If None, the CSV text is returned.

    Returns
    -------
    str or None
        CSV text when ``path`` is None.
    """
    missing = [c for c in COLUMNS if c not in results.columns]
    if missing:
        raise ValueError(f"results is missing columns {missing}")
    return results.to_csv(path, columns=COLUMNS, index=False)


def results_from_csv(path: PathLike) -> pd.DataFrame:
    """Read a result table written by ``results_to_csv``."""
    results = pd.read_csv(path)
    missing = [c for c in COLUMNS if c not in results.columns]
    if missing:
        raise ValueError(f"{path} is missing columns {missing}")
    return results[COLUMNS]


def _default(obj: Any) -> Any:
    if isinstance(obj, np.generic):
        return obj.item()
    if isinstance(obj, np.ndarray):
        return obj.tolist()
    raise TypeError(f"Object of type {type(obj).__name__} is not JSON serializable")


def snapshot_to_json(obj: Any, path: Optional[PathLike] = None, indent: int = 2) -> str:
    """
    Serialize ``obj.snapshot()`` to JSON.

    Parameters
    ----------
    obj : object
        Anything exposing ``snapshot()``: an agent, value function, policy
        or arm.
    path : str or Path, optional
        If given, the JSON text is also written there.
    indent : int
        JSON indentation.

    Returns
    -------
    str
        JSON text.
    """
    if not hasattr(obj, "snapshot"):
        raise TypeError(f"{type(obj).__name__} does not provide snapshot()")
    text = json.dumps(obj.snapshot(), indent=indent, default=_default, ensure_ascii=False)
    if path is not None:
        Path(path).write_text(text, encoding="utf-8")
    return text


def session_to_json(session: TrainTest) -> str:
    """Serialize a ``TrainTest`` configuration."""
    return json.dumps(session.to_dict())


def session_from_json(text: str) -> TrainTest:
    """Rebuild a ``TrainTest`` configuration from ``session_to_json`` output."""
    data = json.loads(text)
    if not isinstance(data, dict):
        raise ValueError("session JSON must be an object")
    return TrainTest.from_dict(data)
