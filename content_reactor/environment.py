"""Load ``.env`` files before settings are read."""

from __future__ import annotations

import os
from pathlib import Path
from typing import List, Optional, Tuple

from dotenv import load_dotenv

PACKAGE_ROOT = Path(__file__).resolve().parents[1]

_loaded: Optional[Tuple[Path, ...]] = None


def dotenv_candidates(base_dirs: Optional[List[Path]] = None) -> List[Path]:
    """Return dotenv paths in precedence order, earliest wins.

    ``REACTOR_ENV_FILE`` may list explicit files separated by ``os.pathsep``.
    Each base directory then contributes ``.env.<REACTOR_ENV>`` (when that
    variable is set) followed by ``.env``.
    """

    ordered: List[Path] = []
    for raw in (os.environ.get("REACTOR_ENV_FILE") or "").split(os.pathsep):
        if raw.strip():
            ordered.append(Path(raw.strip()).expanduser())

    profile = (os.environ.get("REACTOR_ENV") or "").strip()
    names = ([f".env.{profile}"] if profile else []) + [".env"]
    for base in base_dirs if base_dirs is not None else [Path.cwd(), PACKAGE_ROOT]:
        ordered.extend(base / name for name in names)

    unique: List[Path] = []
    for path in ordered:
        resolved = path.resolve()
        if resolved not in unique:
            unique.append(resolved)
    return unique


def load_environment(*, force: bool = False) -> Tuple[Path, ...]:
    """Apply dotenv files without overriding variables already in the process.

    The first call does the work; later calls return the cached result unless
    ``force`` is true.
    """

    global _loaded
    if _loaded is None or force:
        _loaded = tuple(
            path
            for path in dotenv_candidates()
            if path.is_file() and load_dotenv(path, override=False)
        )
    return _loaded


__all__ = ["dotenv_candidates", "load_environment"]
