#!/usr/bin/env python3
"""EventGraph launcher.

Usage:
    python main.py [--settings PATH] [--log-level LEVEL]   # from project root
"""
import sys
from pathlib import Path

# Ensure the project root (this file's directory) is on sys.path so that
# `import eventgraph` works regardless of how the script is invoked.
_root = str(Path(__file__).resolve().parent)
if _root not in sys.path:
    sys.path.insert(0, _root)

from eventgraph.main import main  # noqa: E402

if __name__ == '__main__':
    main()
