"""
Logging Configuration and Transform Tracing.

This module provides the package loggers and an optional tracing hook for
the composite projection. The transforms never print; instead, at each
decision point (hemisphere chosen, lobe chosen, branch chosen) they emit a
`TraceEvent` to a caller-supplied callable. `TraceRecorder` is a ready-made
callable that keeps the events for later inspection.
"""

import logging
import sys
import threading
from collections import Counter
from dataclasses import dataclass
from typing import Any, Dict, List, Tuple


# Configure root logger for the package
def get_logger(name: str, level: int = logging.INFO) -> logging.Logger:
    """Get a logger configured for the projection library.

    Parameters
    ----------
    name : str
        Logger name (typically __name__).
    level : int
        Logging level.

    Returns
    -------
    logging.Logger
        Configured logger instance.
    """
    logger = logging.getLogger(name)

    if not logger.handlers:
        handler = logging.StreamHandler(sys.stdout)
        formatter = logging.Formatter(
            '%(asctime)s | %(name)s | %(levelname)s | %(message)s',
            datefmt='%Y-%m-%d %H:%M:%S'
        )
        handler.setFormatter(formatter)
        logger.addHandler(handler)

    logger.setLevel(level)
    return logger


@dataclass(frozen=True)
class TraceEvent:
    """Record of the decisions taken for one transformed point.

    Attributes
    ----------
    direction : str
        'forward' or 'inverse'.
    hemisphere : str
        'NORTH' or 'SOUTH'.
    lobe_index : int
        Zero-based lobe index within the hemisphere table.
    central_meridian : float
        Central meridian of the lobe in radians.
    branch : str
        'sinusoidal' or 'mollweide'.
    source : tuple
        Input coordinate pair.
    result : tuple
        Output coordinate pair.
    """
    direction: str
    hemisphere: str
    lobe_index: int
    central_meridian: float
    branch: str
    source: Tuple[float, float]
    result: Tuple[float, float]


class TraceRecorder:
    """Thread-safe sink for `TraceEvent`s.

    An instance is callable, so it can be handed directly to a projection
    as its `tracer`.

    Examples
    --------
    >>> recorder = TraceRecorder()
    >>> projection = Homolosine(tracer=recorder)  # doctest: +SKIP
    >>> projection.transform(0.0, 0.0)  # doctest: +SKIP
    >>> recorder.summary()["branches"]  # doctest: +SKIP
    {'sinusoidal': 1}
    """

    def __init__(self):
        self._events: List[TraceEvent] = []
        self._lock = threading.Lock()

    def __call__(self, event: TraceEvent) -> None:
        with self._lock:
            self._events.append(event)

    @property
    def events(self) -> List[TraceEvent]:
        """Snapshot of the recorded events."""
        with self._lock:
            return list(self._events)

    @property
    def last(self) -> TraceEvent:
        """Most recent event."""
        with self._lock:
            if not self._events:
                raise LookupError("No trace events recorded")
            return self._events[-1]

    def clear(self) -> None:
        with self._lock:
            self._events.clear()

    def summary(self) -> Dict[str, Any]:
        """Counts of recorded events by direction, branch and lobe.

        Returns
        -------
        dict
            Summary with keys 'total', 'directions', 'branches' and
            'lobes' (keyed by 'HEMISPHERE:index').
        """
        events = self.events
        return {
            "total": len(events),
            "directions": dict(Counter(e.direction for e in events)),
            "branches": dict(Counter(e.branch for e in events)),
            "lobes": dict(Counter(f"{e.hemisphere}:{e.lobe_index}" for e in events)),
        }
