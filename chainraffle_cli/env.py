from __future__ import annotations

import os
from pathlib import Path


def repo_root() -> Path:
    return Path(__file__).resolve().parent.parent


def load_env_file(env: dict, path: Path) -> None:
    if not path.exists():
        return
    for raw in path.read_text().splitlines():
        line = raw.strip()
        if not line or line.startswith("#") or "=" not in line:
            continue
        key, value = line.split("=", 1)
        key = key.strip()
        value = value.strip().strip('"').strip("'")
        env.setdefault(key, value)


def load_environment(env_file: str | None = None) -> dict:
    """Process environment overlaid with ``.env`` (and ``.env.local``) defaults."""
    env = os.environ.copy()
    if env_file:
        load_env_file(env, Path(env_file).expanduser())
    else:
        load_env_file(env, repo_root() / ".env.local")
        load_env_file(env, repo_root() / ".env")
    return env


def require(env: dict, key: str, hint: str = "") -> str:
    value = env.get(key, "").strip()
    if not value:
        message = f"{key} is required"
        if hint:
            message = f"{message}. {hint}"
        raise RuntimeError(message)
    return value
