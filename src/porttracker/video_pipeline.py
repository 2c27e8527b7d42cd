"""
Port Tracker Video Pipeline - Sequential Frame Source

Reads frames one at a time from a video file or a live capture device.
Everything is synchronous: the render loop pulls a frame, processes it,
and only then asks for the next one.
"""

import time
import logging
from dataclasses import dataclass
from enum import Enum
from typing import Optional, Union

import cv2
import numpy as np

from .tracker_core import SourceUnavailable


class VideoSource(Enum):
    """Video source types."""
    FILE = "file"
    DEVICE = "device"


@dataclass
class FrameMetadata:
    """Metadata for the most recently read frame."""
    frame_number: int
    width: int
    height: int
    native_fps: float
    timestamp: float = 0.0


def parse_source(value: Union[int, str, None], default_device: int = 0) -> Union[int, str]:
    """
    Interpret a command-line source string.

    "camera" -> default_device, "1" -> device 1, anything else -> file path.
    """
    if value is None:
        return default_device
    if isinstance(value, int):
        return value
    text = value.strip()
    if text.lower() == "camera":
        return default_device
    try:
        return int(text)
    except ValueError:
        return text


class VideoFrameSource:
    """
    Blocking frame source over ``cv2.VideoCapture``.

    Usage:
        with VideoFrameSource("refuel_port.mp4") as source:
            frame = source.read()
            while frame is not None:
                ...
                frame = source.read()
    """

    def __init__(self, source: Union[int, str]):
        """
        Args:
            source: Camera index (int) or video file path (str)
        """
        self.source = source
        self._cap: Optional[cv2.VideoCapture] = None
        self._frame_count = 0
        self._width = 0
        self._height = 0
        self._native_fps = 0.0
        self._last_timestamp = 0.0

        self.logger = logging.getLogger(__name__)

    @property
    def source_kind(self) -> VideoSource:
        return VideoSource.DEVICE if isinstance(self.source, int) else VideoSource.FILE

    def open(self) -> "VideoFrameSource":
        """
        Open the file or device.

        Raises:
            SourceUnavailable: the source could not be opened
        """
        if self._cap is not None:
            return self

        cap = cv2.VideoCapture(self.source)
        if not cap.isOpened():
            cap.release()
            self.logger.error(f"Failed to open video source: {self.source}")
            raise SourceUnavailable(f"Cannot open video source: {self.source}")

        self._cap = cap
        self._width = int(cap.get(cv2.CAP_PROP_FRAME_WIDTH))
        self._height = int(cap.get(cv2.CAP_PROP_FRAME_HEIGHT))
        self._native_fps = cap.get(cv2.CAP_PROP_FPS) or 0.0
        self._frame_count = 0

        self.logger.info(
            f"Video source initialized ({self.source_kind.value}): "
            f"{self._width}x{self._height} @ {self._native_fps:.1f}fps"
        )
        return self

    def read(self) -> Optional[np.ndarray]:
        """Next frame, or None once the stream is exhausted."""
        if self._cap is None:
            raise SourceUnavailable("read() called on a source that is not open")

        ok, frame = self._cap.read()
        if not ok or frame is None:
            self.logger.info(f"End of stream after {self._frame_count} frames")
            return None

        self._frame_count += 1
        self._last_timestamp = time.perf_counter()
        # Devices can report 0x0 until the first frame arrives
        self._height, self._width = frame.shape[:2]
        return frame

    def release(self):
        if self._cap is not None:
            self._cap.release()
            self._cap = None
            self.logger.info("Video source released")

    @property
    def is_open(self) -> bool:
        return self._cap is not None

    @property
    def metadata(self) -> FrameMetadata:
        return FrameMetadata(
            frame_number=self._frame_count,
            width=self._width,
            height=self._height,
            native_fps=self._native_fps,
            timestamp=self._last_timestamp,
        )

    def __enter__(self):
        return self.open()

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.release()
        return False


class FpsTimer:
    """
    Frames-per-second estimate from a single timed section.

    Usage:
        timer.start()
        state = session.update(frame)
        fps = timer.stop()
    """

    def __init__(self, clock=time.perf_counter):
        self._clock = clock
        self._start: Optional[float] = None
        self._fps = 0.0

    def start(self):
        self._start = self._clock()

    def stop(self) -> float:
        if self._start is None:
            return self._fps
        elapsed = self._clock() - self._start
        self._start = None
        self._fps = 1.0 / elapsed if elapsed > 0 else 0.0
        return self._fps

    @property
    def fps(self) -> float:
        return self._fps
