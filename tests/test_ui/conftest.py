"""Fixtures for the Playwright tests of the archiver notebook.

The app never sees the checked-in ``vault/``: each session copies it into a
temporary directory, points the notebook at the copy (and at a throwaway
settings file) through ``ARCHIVER_VAULT_DIR`` / ``ARCHIVER_SETTINGS``, and
serves it on a free local port.  Server output goes to a log file in the
same directory and is shown when start-up fails.
"""

from __future__ import annotations

import os
import shutil
import socket
import subprocess
import sys
import time
from dataclasses import dataclass
from pathlib import Path

import pytest
import requests

_ROOT = Path(__file__).parent.parent.parent
_APP = _ROOT / "notebooks" / "archiver_app.py"
SAMPLE_VAULT = _ROOT / "vault"
SANDBOX_NOTE = "Sandbox Only.md"
_STARTUP_TIMEOUT = 30


@dataclass(frozen=True)
class Sandbox:
    vault_dir: Path
    settings_path: Path
    log_path: Path


def snapshot(folder: Path) -> dict[str, bytes]:
    """Relative path -> bytes for every file under *folder*."""
    return {
        p.relative_to(folder).as_posix(): p.read_bytes()
        for p in sorted(folder.rglob("*"))
        if p.is_file()
    }


def _free_port() -> int:
    with socket.socket(socket.AF_INET, socket.SOCK_STREAM) as sock:
        sock.bind(("127.0.0.1", 0))
        return sock.getsockname()[1]


@pytest.fixture(scope="session")
def sample_vault_before() -> dict[str, bytes]:
    return snapshot(SAMPLE_VAULT)


@pytest.fixture()
def read_sample_vault():
    """Callable re-reading the checked-in vault, for before/after comparisons."""
    return lambda: snapshot(SAMPLE_VAULT)


@pytest.fixture(scope="session")
def sandbox(tmp_path_factory, sample_vault_before) -> Sandbox:  # noqa: ARG001
    base = tmp_path_factory.mktemp("archiver-app")
    vault_dir = base / "vault"
    shutil.copytree(SAMPLE_VAULT, vault_dir)
    (vault_dir / SANDBOX_NOTE).write_text("Only in the scratch copy.\n", encoding="utf-8")
    return Sandbox(
        vault_dir=vault_dir,
        settings_path=base / "archiver.json",
        log_path=base / "marimo.log",
    )


@pytest.fixture(scope="session")
def live_url(sandbox: Sandbox):
    """Serve the notebook against the sandbox; yield its base URL."""
    port = _free_port()
    url = f"http://127.0.0.1:{port}"
    env = {
        **os.environ,
        "ARCHIVER_VAULT_DIR": str(sandbox.vault_dir),
        "ARCHIVER_SETTINGS": str(sandbox.settings_path),
    }
    with sandbox.log_path.open("wb") as log:
        proc = subprocess.Popen(
            [sys.executable, "-m", "marimo", "run", str(_APP), "--port", str(port), "--headless"],
            stdout=log,
            stderr=subprocess.STDOUT,
            cwd=str(sandbox.vault_dir.parent),
            env=env,
        )

    deadline = time.time() + _STARTUP_TIMEOUT
    while time.time() < deadline:
        if proc.poll() is not None:
            break
        try:
            if requests.get(url, timeout=1).status_code < 500:
                break
        except requests.RequestException:
            time.sleep(0.5)
    else:
        proc.kill()
        proc.wait()

    if proc.poll() is not None:
        pytest.fail(
            f"marimo exited or never answered on {url}.\n"
            f"log:\n{sandbox.log_path.read_text(errors='replace')}"
        )

    yield url

    proc.terminate()
    try:
        proc.wait(timeout=5)
    except subprocess.TimeoutExpired:
        proc.kill()
