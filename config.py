"""
Settings for the split test variant editor.

Limits here are form-level policy: the pure functions in engine.py never
enforce them on their own, they only read them when validating a submission.
"""
from __future__ import annotations

import logging
import sys
from dataclasses import dataclass
from typing import Optional, Tuple


@dataclass(frozen=True)
class SplitTestConfig:
    min_variants: int = 2
    max_variants: int = 5
    # Allowed drift from 100% before a committed drag snaps back to an even split
    commit_tolerance: float = 0.1
    slider_step: float = 1.0

    def __post_init__(self):
        if self.min_variants < 1:
            raise ValueError(f"min_variants must be at least 1, got {self.min_variants}")
        if self.max_variants < self.min_variants:
            raise ValueError(
                f"max_variants ({self.max_variants}) must be >= min_variants ({self.min_variants})"
            )
        if self.commit_tolerance < 0:
            raise ValueError(f"commit_tolerance must be non-negative, got {self.commit_tolerance}")
        if self.slider_step <= 0:
            raise ValueError(f"slider_step must be positive, got {self.slider_step}")


DEFAULT_CONFIG = SplitTestConfig()


@dataclass(frozen=True)
class Offer:
    id: str
    name: str
    network: str


# Offers selectable in the form. The console loads these from the offers API.
AVAILABLE_OFFERS: Tuple[Offer, ...] = (
    Offer(id="1", name="Weight Loss Program", network="MaxBounty"),
    Offer(id="2", name="Crypto Trading Course", network="ClickBank"),
    Offer(id="3", name="VPN Subscription", network="CJ Affiliate"),
)


def setup_logging(
    level: int = logging.INFO,
    module_name: Optional[str] = None,
) -> logging.Logger:
    """Configure and return a logger with consistent formatting.

    With no module_name the root logger is configured, so the per-module
    loggers in engine.py and main.py share its handler.
    Safe to call on every Streamlit rerun: a logger that already has a
    handler is returned as-is.
    """
    logger = logging.getLogger(module_name)

    if logger.handlers:
        return logger

    logger.setLevel(level)

    handler = logging.StreamHandler(sys.stdout)
    handler.setLevel(level)

    formatter = logging.Formatter(
        fmt="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )
    handler.setFormatter(formatter)
    logger.addHandler(handler)

    return logger
