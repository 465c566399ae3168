from __future__ import annotations

from pathlib import Path

USERS = "users"
POTS = "pots"
PLANTS = "plants"


def project_root() -> Path:
    # persistence/paths.py -> persistence -> project root
    return Path(__file__).resolve().parents[1]


def default_data_dir() -> Path:
    return project_root() / "data"


def ensure_dir(path: Path) -> Path:
    path.mkdir(parents=True, exist_ok=True)
    return path


def collection_path(data_dir: Path, name: str) -> Path:
    return ensure_dir(data_dir) / f"{name}.json"
