"""CivicSim CLI module.

Provides a Textual-based terminal interface for playing civic simulations.

Usage:
    civicsim

Or directly:
    python -m civicsim.cli.app
"""

from civicsim.cli.app import CivicSimApp, PlaySession, main

__all__ = ["CivicSimApp", "PlaySession", "main"]
