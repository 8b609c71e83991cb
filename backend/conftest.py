# Ensure 'backend/' is on sys.path so 'import lessonbook' and 'tests._utils'
# resolve when pytest is started from inside backend/.
from pathlib import Path
import sys

_BACKEND_DIR = Path(__file__).resolve().parent  # <repo>/backend
if str(_BACKEND_DIR) not in sys.path:
    sys.path.insert(0, str(_BACKEND_DIR))

# Migration scripts import alembic.op and are not test modules
collect_ignore_glob = [
    "alembic/*",
    "run.py",
]
