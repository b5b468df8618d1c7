"""Prompt templates for GreenBot and the insight tasks.

Each prompt lives in ``<name>.txt`` next to this module. A file with the
same name under ``./prompts/`` in the working directory takes precedence,
so deployments can reword prompts without touching the package.
"""

from functools import lru_cache
from pathlib import Path

PACKAGE_DIR = Path(__file__).parent
OVERRIDE_DIR = Path("prompts")


@lru_cache(maxsize=16)
def load_prompt(name: str) -> str:
    """Text of prompt ``name`` (file name without ``.txt``).

    Raises:
        FileNotFoundError: Neither the override nor the packaged file exists
    """
    candidates = [Path.cwd() / OVERRIDE_DIR / f"{name}.txt", PACKAGE_DIR / f"{name}.txt"]
    for path in candidates:
        if path.is_file():
            return path.read_text(encoding="utf-8")

    searched = ", ".join(str(p) for p in candidates)
    raise FileNotFoundError(f"No prompt named {name!r} (looked in {searched})")


def get_system_prompt() -> str:
    """GreenBot's persona instruction, sent as the system turn of every chat."""
    return load_prompt("greenbot_system").strip()


def clear_cache() -> None:
    load_prompt.cache_clear()


__all__ = ["clear_cache", "get_system_prompt", "load_prompt"]
