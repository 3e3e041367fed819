"""
Pytest configuration for the test suite.
"""

import sys
from pathlib import Path

# Add the repo root to the path so absolute imports work
# (tests/ is inside the repo root, so parent is the root)
repo_root = Path(__file__).parent.parent
if str(repo_root) not in sys.path:
    sys.path.insert(0, str(repo_root))
