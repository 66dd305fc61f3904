#!/usr/bin/env python3
"""Direct launcher for the CashHeal dashboard.

This script launches Streamlit on cashheal/dashboard.py from the project root.
"""

import subprocess
import sys
from pathlib import Path

# Get the project root and the dashboard module
project_root = Path(__file__).parent.resolve()
dashboard_path = project_root / "cashheal" / "dashboard.py"

if __name__ == "__main__":
    subprocess.run([
        sys.executable, "-m", "streamlit", "run",
        str(dashboard_path),
    ], cwd=project_root)
