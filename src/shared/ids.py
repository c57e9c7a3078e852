"""Event identifier factories.

Detectors never mint ids themselves; they call an ``IdFactory`` with the
rule type and get back an opaque string.  Production runs use
:func:`random_ids`; tests and reproducible runs inject a seeded or
sequential factory.
"""

from __future__ import annotations

import itertools
import logging
import random
import uuid
from collections import defaultdict
from typing import Callable

from src.contracts.enums import RuleType

log = logging.getLogger(__name__)

IdFactory = Callable[[RuleType], str]


def _prefix(rule: RuleType) -> str:
    return f"R{rule.number}"


def random_ids() -> IdFactory:
    """Fresh ``R<n>-xxxxxxxx`` ids from ``uuid4`` (process-wide entropy)."""

    def make(rule: RuleType) -> str:
        return f"{_prefix(rule)}-{uuid.uuid4().hex[:8]}"

    return make


def seeded_ids(seed: int) -> IdFactory:
    """Deterministic ids drawn from a dedicated ``random.Random``.

    The global ``random`` module is left untouched so other callers keep
    their own sequences.
    """
    rng = random.Random(seed)
    log.info("Id factory seeded: %d", seed)

    def make(rule: RuleType) -> str:
        return f"{_prefix(rule)}-{rng.getrandbits(32):08x}"

    return make


def sequential_ids() -> IdFactory:
    """``R1-0001``, ``R1-0002``, ... with an independent counter per rule."""
    counters: dict[RuleType, itertools.count] = defaultdict(lambda: itertools.count(1))

    def make(rule: RuleType) -> str:
        return f"{_prefix(rule)}-{next(counters[rule]):04d}"

    return make
