from __future__ import annotations

import os
from pathlib import Path

import pytest

from content_reactor import environment

pytestmark = pytest.mark.config


@pytest.fixture(autouse=True)
def _clean_env(monkeypatch: pytest.MonkeyPatch) -> None:
    for name in ("REACTOR_ENV_FILE", "REACTOR_ENV", "REACTOR_TEST_VALUE"):
        monkeypatch.delenv(name, raising=False)


def test_candidates_put_explicit_files_and_profile_first(
    tmp_path: Path, monkeypatch: pytest.MonkeyPatch
) -> None:
    explicit = tmp_path / "custom.env"
    monkeypatch.setenv("REACTOR_ENV_FILE", str(explicit))
    monkeypatch.setenv("REACTOR_ENV", "staging")

    candidates = environment.dotenv_candidates([tmp_path, tmp_path])

    assert candidates == [
        explicit.resolve(),
        (tmp_path / ".env.staging").resolve(),
        (tmp_path / ".env").resolve(),
    ]


def test_load_environment_never_overrides_existing_values(
    tmp_path: Path, monkeypatch: pytest.MonkeyPatch
) -> None:
    env_file = tmp_path / "reactor.env"
    env_file.write_text("REACTOR_TEST_VALUE=from-file\n", encoding="utf-8")
    monkeypatch.setenv("REACTOR_ENV_FILE", str(env_file))
    monkeypatch.setattr(environment, "PACKAGE_ROOT", tmp_path / "missing")
    monkeypatch.chdir(tmp_path)

    loaded = environment.load_environment(force=True)
    assert env_file.resolve() in loaded
    assert os.environ["REACTOR_TEST_VALUE"] == "from-file"

    monkeypatch.setenv("REACTOR_TEST_VALUE", "from-process")
    environment.load_environment(force=True)
    assert os.environ["REACTOR_TEST_VALUE"] == "from-process"
