#!/usr/bin/env python3
"""Direct launcher for the studio dashboard.

This script launches Streamlit with the studio_dashboard directory as the app root,
enabling automatic page discovery from the pages/ subdirectory.
"""

import sys
import subprocess
import os
from pathlib import Path

# Get the project root and studio_dashboard directory
project_root = Path(__file__).parent.resolve()
app_dir = project_root / "studio_dashboard"

if __name__ == "__main__":
    # Streamlit discovers pages/ relative to the entry script's directory
    os.chdir(app_dir)
    env = dict(os.environ)
    env["PYTHONPATH"] = os.pathsep.join(filter(None, [str(project_root), env.get("PYTHONPATH")]))
    subprocess.run([
        sys.executable, "-m", "streamlit", "run",
        "Home.py"
    ], env=env)
