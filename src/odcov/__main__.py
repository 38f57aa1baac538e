"""Allow ``python -m odcov`` to run the command line interface."""

from __future__ import annotations

# Local Imports
from . import main

if __name__ == "__main__":
    main()
