"""
Port Tracker Annotation Layer - Circle Highlighting and Overlay Text

Two pieces:
- CircleAnnotator: stateless Hough-gradient circle detection that marks
  every circle it finds directly on the frame
- OverlayRenderer: bounding box, target label and diagnostic text
  (title, FPS, tracking failure)

All drawing happens in place on the BGR frame passed in.
"""

from dataclasses import dataclass, field
from typing import List, Tuple

import numpy as np
import cv2

from .tracker_core import BoundingRegion


@dataclass(frozen=True)
class CircleParams:
    """
    Fixed Hough-circle parameters, tuned for the demo's camera distance.

    min_dist_divisor: minimum distance between centers is rows / divisor
    canny_threshold: upper Canny threshold used by the gradient method
    accumulator_threshold: votes needed for a circle (lower = more circles)
    min_radius, max_radius: 0 means unbounded
    """
    blur_kernel: Tuple[int, int] = (5, 5)
    blur_sigma: float = 2.0
    dp: float = 1.0
    min_dist_divisor: int = 8
    canny_threshold: float = 80.0
    accumulator_threshold: float = 55.0
    min_radius: int = 0
    max_radius: int = 0


@dataclass(frozen=True)
class DetectedCircle:
    x: int
    y: int
    radius: int


class CircleAnnotator:
    """Detects circular edge features and draws a center dot and outline for each."""

    CENTER_RADIUS = 3
    CENTER_COLOR = (0, 225, 0)
    OUTLINE_COLOR = (0, 0, 255)
    OUTLINE_THICKNESS = 3

    def __init__(self, params: CircleParams = CircleParams()):
        self.params = params

    def detect(self, frame: np.ndarray) -> List[DetectedCircle]:
        p = self.params
        gray = cv2.cvtColor(frame, cv2.COLOR_BGR2GRAY)
        blurred = cv2.GaussianBlur(gray, p.blur_kernel, p.blur_sigma, sigmaY=p.blur_sigma)

        # Vote on the blurred image; the C++ prototype blurred but passed the raw gray

        circles = cv2.HoughCircles(
            blurred,
            cv2.HOUGH_GRADIENT,
            dp=p.dp,
            minDist=max(1.0, blurred.shape[0] / p.min_dist_divisor),
            param1=p.canny_threshold,
            param2=p.accumulator_threshold,
            minRadius=p.min_radius,
            maxRadius=p.max_radius,
        )
        if circles is None:
            return []

        return [
            DetectedCircle(int(round(cx)), int(round(cy)), int(round(r)))
            for cx, cy, r in circles[0]
        ]

    def annotate(self, frame: np.ndarray) -> np.ndarray:
        """Mark every detected circle on ``frame`` and return it."""
        for circle in self.detect(frame):
            center = (circle.x, circle.y)
            cv2.circle(frame, center, self.CENTER_RADIUS, self.CENTER_COLOR, -1, cv2.LINE_8)
            cv2.circle(frame, center, circle.radius, self.OUTLINE_COLOR,
                       self.OUTLINE_THICKNESS, cv2.LINE_8)
        return frame


@dataclass
class ColorScheme:
    """BGR colors for the overlay."""
    initial_box: Tuple[int, int, int] = (255, 0, 0)      # Blue
    tracked_box: Tuple[int, int, int] = (0, 255, 0)      # Green
    label: Tuple[int, int, int] = (255, 0, 0)            # Blue
    failure: Tuple[int, int, int] = (0, 0, 255)          # Red
    hud: Tuple[int, int, int] = (255, 170, 50)           # Light blue


@dataclass
class OverlayRenderer:
    """Draws the tracked region and the fixed diagnostic text."""
    title: str = "PORT TRACKER"
    target_label: str = "Refueling Port"
    failure_text: str = "Tracking failure detected"
    colors: ColorScheme = field(default_factory=ColorScheme)
    font: int = cv2.FONT_HERSHEY_SIMPLEX
    box_thickness: int = 2

    # Fixed text anchors
    title_origin: Tuple[int, int] = (100, 20)
    fps_origin: Tuple[int, int] = (200, 50)
    failure_origin: Tuple[int, int] = (200, 80)

    def draw_region(self, frame: np.ndarray, region: BoundingRegion,
                    color: Tuple[int, int, int]) -> np.ndarray:
        cv2.rectangle(frame, region.top_left(), region.bottom_right(),
                      color, self.box_thickness, cv2.LINE_4)
        return frame

    def draw_initial_region(self, frame: np.ndarray, region: BoundingRegion) -> np.ndarray:
        return self.draw_region(frame, region, self.colors.initial_box)

    def draw_tracking_result(self, frame: np.ndarray, region: BoundingRegion,
                             success: bool) -> np.ndarray:
        if success:
            self.draw_region(frame, region, self.colors.tracked_box)
            cv2.putText(frame, self.target_label, region.top_left(),
                        self.font, 0.75, self.colors.label, 2)
        else:
            cv2.putText(frame, self.failure_text, self.failure_origin,
                        self.font, 1.0, self.colors.failure, 2)
        return frame

    def draw_hud(self, frame: np.ndarray, fps: float) -> np.ndarray:
        cv2.putText(frame, self.title, self.title_origin,
                    self.font, 0.75, self.colors.hud, 2)
        cv2.putText(frame, f"FPS : {int(fps)}", self.fps_origin,
                    self.font, 1.0, self.colors.hud, 2)
        return frame
