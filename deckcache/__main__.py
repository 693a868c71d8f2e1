"""Entry point for `python -m deckcache`.

Usage:
    python -m deckcache show <uid>
    python -m deckcache set-release-channel <uid> <channel>
"""

from __future__ import annotations

from deckcache.cli.main import main

main()
