"""
Backand CLI - Three-layer client for the Backand REST API.

Layers:
- core: Wire rules, session state and HTTP client
- sdk: High-level BackandClient with nice ergonomics
- cli: Opinionated command-line interface
"""

from backand_cli.sdk import BackandClient

__version__ = "0.1.0"
__all__ = ["BackandClient"]
