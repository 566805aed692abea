"""
Pytest configuration for the bcv-rates project.

This file makes sure the src/ layout is importable as `bcv_rates`
when running tests without installing the package.
"""

import sys
from pathlib import Path

ROOT_DIR = Path(__file__).resolve().parents[1]
SRC_DIR = ROOT_DIR / "src"

if str(SRC_DIR) not in sys.path:
    sys.path.insert(0, str(SRC_DIR))
