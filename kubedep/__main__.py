"""Entry point for `python -m kubedep`.

Usage:
    python -m kubedep
    uv run python -m kubedep
"""

from __future__ import annotations

import asyncio

from kubedep.app import main

asyncio.run(main())
