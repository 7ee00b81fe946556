from __future__ import annotations

import sys
from pathlib import Path


def _ensure_repo_root_on_path() -> None:
    """Ensure the repository root (parent of this package) is on ``sys.path``.

    Running ``python prime_cards/__main__.py`` directly leaves the package
    undiscoverable; inserting the parent directory lets the absolute import
    below resolve.
    """
    pkg_dir = Path(__file__).resolve().parent
    repo_root_str = str(pkg_dir.parent)
    if repo_root_str not in sys.path:
        sys.path.insert(0, repo_root_str)


if __package__:
    # python -m prime_cards
    from .app import run
else:
    # Executed as a plain script.
    _ensure_repo_root_on_path()
    from prime_cards.app import run


def main() -> int:
    """Open the prime card grid."""
    return run()


if __name__ == "__main__":
    raise SystemExit(main())
