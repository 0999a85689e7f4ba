"""Application state container."""

from __future__ import annotations

import logging
from dataclasses import dataclass

from .settings import ResolverSettings


@dataclass
class AppState:
    """Container for CLI-wide state and dependencies.

    Passed to commands through the typer context to avoid global state and
    enable testing.
    """

    settings: ResolverSettings
    logger: logging.Logger
