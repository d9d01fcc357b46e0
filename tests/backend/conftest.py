import os
import sys
import tempfile

sys.path.insert(0, os.path.join(os.path.dirname(__file__), "../../backend"))

# main.py builds its app state at import time; keep it off the real home dir
# and away from the system clipboard.
os.environ.setdefault("WORDHOARD_DATA_DIR", tempfile.mkdtemp(prefix="wordhoard-tests-"))
os.environ.setdefault("WORDHOARD_WATCH_CLIPBOARD", "0")
