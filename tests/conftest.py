"""Test configuration.

Loads optional .env variables (project root .env), keeps the Redis log sink
off so tests never need a Redis server.
"""

from pathlib import Path
import os

ROOT = Path(__file__).resolve().parents[1]


def _load_dotenv(dotenv_path: Path) -> None:
    if not dotenv_path.exists():
        return
    for line in dotenv_path.read_text().splitlines():
        line = line.strip()
        if not line or line.startswith('#') or '=' not in line:
            continue
        k, v = line.split('=', 1)
        k = k.strip()
        v = v.strip().strip('"').strip("'")
        # don't override existing env vars
        if k not in os.environ:
            os.environ[k] = v


_load_dotenv(ROOT / '.env')

# Sanitize env vars that may contain inline comments (e.g. "8453 #base").
for _k, _v in list(os.environ.items()):
    if isinstance(_v, str) and '#' in _v:
        cleaned = _v.split('#', 1)[0].strip()
        if cleaned != _v:
            os.environ[_k] = cleaned

os.environ["LOG_REDIS_ENABLED"] = "false"
