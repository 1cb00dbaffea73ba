"""
Entry point for `python -m brokersign`.

Usage:
    python -m brokersign params payload.json
    python -m brokersign view payload.json
    python -m brokersign sign payload.json --sdk mysdk:create_sdk --mock
"""

from .ui.cli import main

main()
