"""Allows ``python -m animvtk``."""
import sys

from animvtk.main import main

if __name__ == "__main__":
    sys.exit(main())
