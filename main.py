from __future__ import annotations

from dolphin_parser.api.app import create_app

app = create_app()
