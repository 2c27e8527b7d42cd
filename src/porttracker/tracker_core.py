"""
Port Tracker Core - Single-Object Tracking Session

Wraps an off-the-shelf OpenCV tracker behind a small state machine:

    UNINITIALIZED --init()--> INITIALIZED --update()--> TRACKING

The session owns exactly one tracking strategy. KCF (Kernelized Correlation
Filter) is the default; CSRT and MIL can be swapped in without touching the
render loop. A failed update never resets the session, it simply keeps
trying on the next frame from its last internal state.
"""

import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass
from enum import Enum
from typing import Callable, Dict, Optional, Sequence, Tuple

import numpy as np
import cv2


class PortTrackerError(Exception):
    """Base class for port tracker errors."""


class SourceUnavailable(PortTrackerError):
    """Video file or capture device could not be opened."""


class TrackerStateError(PortTrackerError):
    """Session used out of order (update before init, or init twice)."""


class TrackerUnavailable(PortTrackerError):
    """Requested tracking algorithm is missing from the installed OpenCV build."""


class TrackingStatus(Enum):
    """Lifecycle of a tracker session."""
    UNINITIALIZED = "uninitialized"
    INITIALIZED = "initialized"   # Appearance model registered, no update yet
    TRACKING = "tracking"         # At least one update has run


@dataclass
class BoundingRegion:
    """Axis-aligned rectangle in frame coordinates."""
    x: float
    y: float
    width: float
    height: float

    @classmethod
    def from_tuple(cls, values: Sequence[float]) -> "BoundingRegion":
        x, y, w, h = values
        return cls(float(x), float(y), float(w), float(h))

    def as_tuple(self) -> Tuple[float, float, float, float]:
        return (self.x, self.y, self.width, self.height)

    def as_int_tuple(self) -> Tuple[int, int, int, int]:
        return (int(round(self.x)), int(round(self.y)),
                int(round(self.width)), int(round(self.height)))

    def top_left(self) -> Tuple[int, int]:
        return (int(round(self.x)), int(round(self.y)))

    def bottom_right(self) -> Tuple[int, int]:
        return (int(round(self.x + self.width)), int(round(self.y + self.height)))

    @property
    def area(self) -> float:
        return max(0.0, self.width) * max(0.0, self.height)

    @property
    def is_empty(self) -> bool:
        return self.width <= 0 or self.height <= 0

    def within(self, frame_width: int, frame_height: int) -> bool:
        """True if the whole rectangle lies inside a frame of the given size."""
        return (
            self.x >= 0 and self.y >= 0
            and self.x + self.width <= frame_width
            and self.y + self.height <= frame_height
        )

    def clipped_to(self, frame_width: int, frame_height: int) -> "BoundingRegion":
        """Intersect with the frame rectangle. May come back empty."""
        x1 = min(max(self.x, 0.0), float(frame_width))
        y1 = min(max(self.y, 0.0), float(frame_height))
        x2 = min(max(self.x + self.width, 0.0), float(frame_width))
        y2 = min(max(self.y + self.height, 0.0), float(frame_height))
        return BoundingRegion(x1, y1, x2 - x1, y2 - y1)


@dataclass
class TrackingState:
    """Result of a single tracker update."""
    region: BoundingRegion
    success: bool
    status: TrackingStatus
    frames_tracked: int = 0
    consecutive_failures: int = 0


class TrackingStrategy(ABC):
    """A stateful single-object tracking algorithm."""

    name: str = "abstract"

    @abstractmethod
    def init(self, frame: np.ndarray, bbox: Tuple[int, int, int, int]) -> None:
        """Register the appearance of ``bbox`` in ``frame``."""

    @abstractmethod
    def update(self, frame: np.ndarray) -> Tuple[bool, Tuple[float, float, float, float]]:
        """Locate the target in a new frame. Returns (ok, (x, y, w, h))."""


class OpenCVTrackerStrategy(TrackingStrategy):
    """Adapter over any ``cv2.Tracker*`` instance."""

    def __init__(self, name: str, factory: Callable[[], object]):
        self.name = name
        self._factory = factory
        self._tracker = None

    def init(self, frame: np.ndarray, bbox: Tuple[int, int, int, int]) -> None:
        self._tracker = self._factory()
        result = self._tracker.init(frame, tuple(int(v) for v in bbox))
        # Legacy trackers return a bool, the 4.5+ API returns None
        if result is False:
            raise TrackerStateError(f"{self.name} tracker refused initial region {bbox}")

    def update(self, frame: np.ndarray) -> Tuple[bool, Tuple[float, float, float, float]]:
        if self._tracker is None:
            raise TrackerStateError(f"{self.name} tracker updated before init")
        ok, bbox = self._tracker.update(frame)
        return bool(ok), tuple(float(v) for v in bbox)


# Factory names per algorithm, probed in cv2 first then cv2.legacy
_OPENCV_FACTORIES: Dict[str, str] = {
    "kcf": "TrackerKCF_create",
    "csrt": "TrackerCSRT_create",
    "mil": "TrackerMIL_create",
}

AVAILABLE_TRACKERS = tuple(_OPENCV_FACTORIES)


def _resolve_factory(name: str) -> Optional[Callable[[], object]]:
    attr = _OPENCV_FACTORIES[name]
    if hasattr(cv2, attr):
        return getattr(cv2, attr)
    legacy = getattr(cv2, "legacy", None)
    if legacy is not None and hasattr(legacy, attr):
        return getattr(legacy, attr)
    return None


def create_strategy(name: str = "kcf") -> TrackingStrategy:
    """
    Build a tracking strategy by algorithm name.

    Raises:
        ValueError: unknown algorithm name
        TrackerUnavailable: algorithm not compiled into this OpenCV build
            (KCF and CSRT need opencv-contrib-python)
    """
    key = name.lower()
    if key not in _OPENCV_FACTORIES:
        raise ValueError(
            f"Unknown tracker '{name}'. Choose one of: {', '.join(AVAILABLE_TRACKERS)}"
        )
    factory = _resolve_factory(key)
    if factory is None:
        raise TrackerUnavailable(
            f"OpenCV build has no {_OPENCV_FACTORIES[key]}. Install opencv-contrib-python."
        )
    return OpenCVTrackerStrategy(key, factory)


class TrackerSession:
    """
    Owns one tracking strategy and the last known bounding region.

    Usage:
        session = TrackerSession(create_strategy("kcf"))
        session.init(first_frame, BoundingRegion(760, 400, 270, 200))

        while True:
            state = session.update(frame)
            if not state.success:
                # show failure; the session keeps trying next frame
                ...
    """

    def __init__(self, strategy: Optional[TrackingStrategy] = None):
        self.strategy = strategy if strategy is not None else create_strategy("kcf")
        self._status = TrackingStatus.UNINITIALIZED
        self._region: Optional[BoundingRegion] = None
        self._frames_tracked = 0
        self._consecutive_failures = 0
        self._last_success = True
        self.logger = logging.getLogger("TrackerSession")

    def init(self, frame: np.ndarray, region: BoundingRegion) -> None:
        if self._status != TrackingStatus.UNINITIALIZED:
            raise TrackerStateError("Tracker session is already initialized")
        if region.is_empty:
            raise ValueError(f"Initial region is empty: {region}")

        h, w = frame.shape[:2]
        if not region.within(w, h):
            raise ValueError(f"Initial region {region} lies outside the {w}x{h} frame")

        self.strategy.init(frame, region.as_int_tuple())
        self._region = region
        self._status = TrackingStatus.INITIALIZED
        self.logger.info(f"Initialized {self.strategy.name} tracker at {region.as_int_tuple()}")

    def update(self, frame: np.ndarray) -> TrackingState:
        if self._status == TrackingStatus.UNINITIALIZED:
            raise TrackerStateError("update() called before init()")

        ok, bbox = self.strategy.update(frame)
        self._status = TrackingStatus.TRACKING
        self._frames_tracked += 1

        if ok:
            h, w = frame.shape[:2]
            region = BoundingRegion.from_tuple(bbox).clipped_to(w, h)
            if region.is_empty:
                # Fully off-frame: a success with nothing visible is a failure
                ok = False
            else:
                self._region = region

        if ok:
            self._consecutive_failures = 0
        else:
            self._consecutive_failures += 1

        if ok != self._last_success:
            if ok:
                self.logger.info(f"Target reacquired at {self._region.as_int_tuple()}")
            else:
                self.logger.info("Tracking failure detected")
            self._last_success = ok
        self.logger.debug(
            f"frame={self._frames_tracked} ok={ok} region={self._region.as_int_tuple()}"
        )

        return TrackingState(
            region=self._region,
            success=ok,
            status=self._status,
            frames_tracked=self._frames_tracked,
            consecutive_failures=self._consecutive_failures,
        )

    @property
    def status(self) -> TrackingStatus:
        return self._status

    @property
    def region(self) -> Optional[BoundingRegion]:
        return self._region

    @property
    def is_initialized(self) -> bool:
        return self._status != TrackingStatus.UNINITIALIZED
