"""Default file locations for FinCLI.

Every path can be overridden through an environment variable or the
matching command-line option.
"""

import os
from pathlib import Path

CONFIG_PATH = Path(os.getenv("FINCLI_CONFIG", "config.yaml"))
CATALOG_PATH = Path(os.getenv("FINCLI_CATALOG", "expenses.json"))

# Human-readable (.txt) and structured (.json) reports live side by side
REPORTS_DIR = Path(os.getenv("FINCLI_REPORTS_DIR", "reports"))
DATA_DIR = Path(os.getenv("FINCLI_DATA_DIR", "data"))

REPORT_EXTENSION = ".txt"
DATA_EXTENSION = ".json"
