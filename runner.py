"""Repository-level CLI entrypoint for the percolation engine.

This wrapper preserves the short invocation style:

    python runner.py stats 200 100
    python runner.py compare config_comparison.json [--output-dir results/]

It delegates execution to :mod:`percolation_engine.runner`.
"""

from __future__ import annotations

import sys
from pathlib import Path

from percolation_engine.runner import main


def _rewrite_config_path_arg(argv: list[str]) -> list[str]:
    """Rewrite the compare config argument to ``percolation_engine/<name>`` when needed.

    Example configs live under ``percolation_engine/`` but are usually named
    from the repository root.
    """
    if len(argv) < 3 or argv[1] != "compare":
        return argv

    candidate = Path(argv[2])
    if candidate.exists():
        return argv

    alt = Path("percolation_engine") / candidate
    if alt.exists():
        out = list(argv)
        out[2] = str(alt)
        return out

    return argv


if __name__ == "__main__":
    sys.argv = _rewrite_config_path_arg(sys.argv)
    main()
