"""Entry point for GG Arcade."""

from __future__ import annotations

import sys

from gg_arcade.arcade import main

if __name__ == "__main__":
    sys.exit(main())
