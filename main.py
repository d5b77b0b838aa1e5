#!/usr/bin/env python3
"""Mind Map - Standalone Desktop Application.

Usage:
    python main.py [--storage FILE] [--debug]     # from project root
    python -m mindmap.main [--storage FILE] [--debug]
"""
import sys
from pathlib import Path

# Ensure the project root (this file's directory) is on sys.path so that
# `import mindmap` works regardless of how the script is invoked.
_root = str(Path(__file__).resolve().parent)
if _root not in sys.path:
    sys.path.insert(0, _root)

from mindmap.main import main  # noqa: E402

if __name__ == '__main__':
    sys.exit(main())
