"""
Allow running framestack as a module: python -m framestack
"""

from .cli import main

if __name__ == "__main__":
    raise SystemExit(main())
