"""
Port Tracker - Single-Object KCF Tracking Demo

Follows one target (a refueling port) through a video file or live camera
feed with OpenCV's Kernelized Correlation Filter tracker, and highlights
circular features found by the Hough-gradient circle detector.

Quick Start:
    from porttracker import DemoConfig, PortTrackerDemo

    demo = PortTrackerDemo(DemoConfig(video_path="refuel_port.mp4"))
    exit_code = demo.run()

Building blocks:
    from porttracker import VideoFrameSource, TrackerSession, BoundingRegion

    with VideoFrameSource("refuel_port.mp4") as source:
        frame = source.read()
        session = TrackerSession()
        session.init(frame, BoundingRegion(760, 400, 270, 200))
        state = session.update(source.read())
"""

__version__ = "1.0.0"
__author__ = "Sparta Robotics"

# Tracking
from .tracker_core import (
    PortTrackerError,
    SourceUnavailable,
    TrackerStateError,
    TrackerUnavailable,
    TrackingStatus,
    BoundingRegion,
    TrackingState,
    TrackingStrategy,
    OpenCVTrackerStrategy,
    TrackerSession,
    AVAILABLE_TRACKERS,
    create_strategy,
)

# Video
from .video_pipeline import (
    VideoSource,
    FrameMetadata,
    VideoFrameSource,
    FpsTimer,
    parse_source,
)

# Annotation
from .annotation_layer import (
    CircleParams,
    DetectedCircle,
    CircleAnnotator,
    ColorScheme,
    OverlayRenderer,
)

# Demo loop
from .demo import (
    DemoConfig,
    StopReason,
    RunSummary,
    OpenCVDisplay,
    PortTrackerDemo,
)

__all__ = [
    "__version__",

    # Tracking
    "PortTrackerError",
    "SourceUnavailable",
    "TrackerStateError",
    "TrackerUnavailable",
    "TrackingStatus",
    "BoundingRegion",
    "TrackingState",
    "TrackingStrategy",
    "OpenCVTrackerStrategy",
    "TrackerSession",
    "AVAILABLE_TRACKERS",
    "create_strategy",

    # Video
    "VideoSource",
    "FrameMetadata",
    "VideoFrameSource",
    "FpsTimer",
    "parse_source",

    # Annotation
    "CircleParams",
    "DetectedCircle",
    "CircleAnnotator",
    "ColorScheme",
    "OverlayRenderer",

    # Demo
    "DemoConfig",
    "StopReason",
    "RunSummary",
    "OpenCVDisplay",
    "PortTrackerDemo",
]
