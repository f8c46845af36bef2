import os
import pathlib
import sys

# Render charts without a display
os.environ.setdefault("MPLBACKEND", "Agg")

# Add project root to sys.path so the top-level modules import when running from a checkout
sys.path.insert(0, str(pathlib.Path(__file__).resolve().parent.parent))
