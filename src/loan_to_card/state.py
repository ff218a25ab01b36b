from __future__ import annotations

import logging
from dataclasses import dataclass

from .settings import LoanToCardSettings


@dataclass
class AppState:
    """Settings and logger handed to every CLI command and pipeline run."""

    settings: LoanToCardSettings
    logger: logging.Logger
