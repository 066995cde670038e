import os
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv

DOCKER_DATABASE_HOST = "postgres"


def load_env(env_path: Optional[Path] = None) -> None:
    """Load .env from project root if present, then fix DATABASE_URL.

    Values already present in the process environment win over the file.
    """
    env_path = env_path or Path.cwd() / ".env"
    if env_path.exists():
        load_dotenv(dotenv_path=env_path)
    fix_database_url()


def is_truthy(value: Optional[str]) -> bool:
    return value is not None and value.strip().lower() in {"1", "true", "yes", "on"}


def _nth_occurrence_index(s: str, char: str, n: int) -> int:
    if n < 1:
        return -1
    for i, c in enumerate(s):
        if c == char:
            n -= 1
            if n < 1:
                return i
    return -1


def dockerize_database_url(database_url: str) -> str:
    """
    Point a DSN at the compose service instead of the host it names.

    Everything between the credentials' '@' and the path's slash is
    replaced, so the port goes too:
    postgresql://u:p@localhost:5432/db -> postgresql://u:p@postgres/db
    """
    at = database_url.find("@")
    third_slash = _nth_occurrence_index(database_url, "/", 3)
    if at < 0 or third_slash < 0 or third_slash < at:
        return database_url
    return f"{database_url[:at + 1]}{DOCKER_DATABASE_HOST}{database_url[third_slash:]}"


def fix_database_url() -> None:
    """Rewrite DATABASE_URL in place when running inside the container network."""
    url = os.environ.get("DATABASE_URL")
    if url and is_truthy(os.environ.get("IS_IN_DOCKER")):
        os.environ["DATABASE_URL"] = dockerize_database_url(url)


def get_database_url() -> Optional[str]:
    url = os.environ.get("DATABASE_URL", "").strip()
    return url or None


def get_int(name: str, default: int) -> int:
    raw = os.environ.get(name)
    if raw is None or not raw.strip():
        return default
    return int(raw)


def get_float(name: str, default: float) -> float:
    raw = os.environ.get(name)
    if raw is None or not raw.strip():
        return default
    return float(raw)
