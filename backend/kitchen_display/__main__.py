"""Run the kitchen display CLI with ``python -m kitchen_display``."""

from kitchen_display.cli import app

app()
