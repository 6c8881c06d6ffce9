"""Global, project-wide configuration constants.

This module intentionally contains **no business logic** – only simple,
shared filesystem anchors that many modules can import.

Tracking parameters live in `beatroot.tracking.config`; pipeline modules
define their own folder constants on top of these anchors.
"""

from pathlib import Path

# Core roots
PACKAGE_ROOT: Path = Path(__file__).resolve().parent
# From src/beatroot/global_config.py, go up two levels: src/beatroot -> src -> repo root
PROJECT_ROOT: Path = PACKAGE_ROOT.parent.parent

# Core Names
PROJECT_NAME = "beatroot"
PACKAGE_NAME = "beatroot"

# Data directories
DATA_DIR: Path = PROJECT_ROOT / "data"
DERIVED_DIR: Path = DATA_DIR / "derived"

# Logs directories
LOGS_DIR: Path = DATA_DIR / "logs"
DERIVED_LOGS_DIR: Path = LOGS_DIR / "derived"
