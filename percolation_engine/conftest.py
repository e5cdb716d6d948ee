# conftest.py (package root)
#
# Ensures the repository root is on sys.path when pytest is invoked from
# inside the package directory, so "from percolation_engine.grid import ..."
# and the root-level runner wrapper resolve without a package install.
#
# Usage:
#   pytest percolation_engine/tests -v
#   cd percolation_engine/ && pytest tests/test_grid.py -v

import sys
from pathlib import Path

sys.path.insert(0, str(Path(__file__).parent.parent))
