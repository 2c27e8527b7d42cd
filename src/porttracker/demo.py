"""
Port Tracker Demo Loop

Pulls frames from a source, updates the tracker session, highlights circles,
draws the overlay and shows the result until the stream ends or the user
presses Esc / 'q'.

Before the loop starts the first frame is shown with the initial region in
blue and the loop blocks until any key is pressed, so the operator can
confirm the target.
"""

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Optional, Tuple, Union

import cv2
import numpy as np

from .tracker_core import (
    BoundingRegion,
    SourceUnavailable,
    TrackerSession,
    TrackerUnavailable,
    create_strategy,
)
from .video_pipeline import VideoFrameSource, FpsTimer
from .annotation_layer import CircleAnnotator, OverlayRenderer

KEY_ESC = 27


@dataclass
class DemoConfig:
    """Process-wide settings for a tracking run."""
    video_path: str = "refuel_port.mp4"
    device_index: int = 1
    use_live_device: bool = False

    # Preset for refuel_port.mp4
    initial_region: Tuple[float, float, float, float] = (760, 400, 270, 200)
    select_roi: bool = False

    tracker_name: str = "kcf"
    annotate_circles: bool = True

    window_name: str = "Port_Tracker"
    title: str = "PORT TRACKER"
    target_label: str = "Refueling Port"

    quit_keys: Tuple[int, ...] = (KEY_ESC, ord('q'))
    confirm_delay_ms: int = 0     # 0 blocks until a key is pressed
    frame_delay_ms: int = 1

    def resolve_source(self) -> Union[int, str]:
        return self.device_index if self.use_live_device else self.video_path


class StopReason(Enum):
    END_OF_STREAM = "end_of_stream"
    USER_QUIT = "user_quit"


@dataclass
class RunSummary:
    frames_processed: int = 0
    tracking_failures: int = 0
    stop_reason: Optional[StopReason] = None


class OpenCVDisplay:
    """HighGUI window used as the display sink."""

    def show(self, window_name: str, frame: np.ndarray):
        cv2.imshow(window_name, frame)

    def wait_key(self, delay_ms: int) -> int:
        return cv2.waitKey(delay_ms) & 0xFF

    def select_roi(self, window_name: str, frame: np.ndarray) -> Tuple[int, int, int, int]:
        return tuple(cv2.selectROI(window_name, frame, False))

    def close(self):
        cv2.destroyAllWindows()


class PortTrackerDemo:
    """
    Single-object tracking demo.

    Every collaborator can be injected; anything left as None is built from
    the config when run() starts.
    """

    def __init__(
            self,
            config: Optional[DemoConfig] = None,
            source=None,
            session: Optional[TrackerSession] = None,
            annotator: Optional[CircleAnnotator] = None,
            renderer: Optional[OverlayRenderer] = None,
            display=None,
            timer: Optional[FpsTimer] = None
    ):
        self.config = config or DemoConfig()
        self.source = source
        self.session = session
        self.annotator = annotator or CircleAnnotator()
        self.renderer = renderer or OverlayRenderer(
            title=self.config.title,
            target_label=self.config.target_label,
        )
        self.display = display or OpenCVDisplay()
        self.timer = timer or FpsTimer()

        self.summary = RunSummary()
        self.logger = logging.getLogger("PortTrackerDemo")

    def run(self) -> int:
        """Run to completion. Returns the process exit status."""
        if self.source is None:
            self.source = VideoFrameSource(self.config.resolve_source())

        try:
            self.source.open()
        except SourceUnavailable as e:
            self.logger.error(str(e))
            print("ERROR! No video was found")
            return 1

        try:
            return self._run_opened()
        except SourceUnavailable as e:
            self.logger.error(str(e))
            print("ERROR! No video was found")
            return 1
        except (TrackerUnavailable, ValueError) as e:
            self.logger.error(f"Cannot start tracking: {e}")
            return 1
        finally:
            self.source.release()
            self.display.close()
            self.logger.info("Demo stopped.")

    def _run_opened(self) -> int:
        frame = self.source.read()
        if frame is None:
            raise SourceUnavailable("Video source produced no frames")

        region = self._initial_region(frame)

        if self.session is None:
            self.session = TrackerSession(create_strategy(self.config.tracker_name))
        self.session.init(frame, region)

        try:
            preview = self.renderer.draw_initial_region(frame.copy(), region)
            self.display.show(self.config.window_name, preview)
            self.logger.info("Press any key to confirm the target and start tracking")
            self.display.wait_key(self.config.confirm_delay_ms)

            self._loop()
        except KeyboardInterrupt:
            self.logger.info("Interrupted by user")
            self.summary.stop_reason = StopReason.USER_QUIT

        self.logger.info(
            f"Processed {self.summary.frames_processed} frames, "
            f"{self.summary.tracking_failures} tracking failures "
            f"({self.summary.stop_reason.value})"
        )
        return 0

    def _initial_region(self, frame: np.ndarray) -> BoundingRegion:
        default = BoundingRegion.from_tuple(self.config.initial_region)
        region = default

        if self.config.select_roi:
            selected = BoundingRegion.from_tuple(
                self.display.select_roi(self.config.window_name, frame)
            )
            if selected.is_empty:
                self.logger.warning("ROI selection cancelled, using the preset region")
            else:
                region = selected

        h, w = frame.shape[:2]
        if not region.within(w, h):
            clipped = region.clipped_to(w, h)
            if clipped.is_empty:
                raise ValueError(f"Initial region {region.as_int_tuple()} is outside the {w}x{h} frame")
            self.logger.warning(
                f"Initial region {region.as_int_tuple()} clipped to {clipped.as_int_tuple()}"
            )
            region = clipped
        return region

    def _loop(self):
        cfg = self.config
        self.summary.stop_reason = StopReason.END_OF_STREAM

        while True:
            frame = self.source.read()
            if frame is None:
                break

            self.timer.start()
            state = self.session.update(frame)
            fps = self.timer.stop()

            if cfg.annotate_circles:
                self.annotator.annotate(frame)

            self.renderer.draw_tracking_result(frame, state.region, state.success)
            self.renderer.draw_hud(frame, fps)
            self.display.show(cfg.window_name, frame)

            self.summary.frames_processed += 1
            if not state.success:
                self.summary.tracking_failures += 1

            key = self.display.wait_key(cfg.frame_delay_ms)
            if key in cfg.quit_keys:
                self.logger.info("Quit key pressed")
                self.summary.stop_reason = StopReason.USER_QUIT
                break
