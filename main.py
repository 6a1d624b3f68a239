#!/usr/bin/env python3
"""ARISE entry point.

Run with:
    python main.py
    python -m arise
"""

from arise.__main__ import main


if __name__ == "__main__":
    main()
