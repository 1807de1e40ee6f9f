"""agent-ranker: Rank service agents against an incoming customer profile."""

__version__ = "0.1.0"

import os
import pathlib

DEFAULT_DB_PATH = os.path.join(
    os.path.expanduser("~"), ".agent-ranker", "agent_ranker.db"
)

PACKAGE_DIR = pathlib.Path(__file__).parent
