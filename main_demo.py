#!/usr/bin/env python3
"""
Port Tracker - KCF Tracking Demo

Demonstrates tracking of a refueling port inside a bounding box:
1. Opens the demo video (or a live camera)
2. Shows the first frame with the initial box - press any key to confirm
3. Follows the port frame by frame with the KCF tracker
4. Highlights circular features found in every frame
5. Shows "Tracking failure detected" whenever the tracker loses the port

Usage:
    python main_demo.py

Controls:
    - Any key: confirm the initial box
    - Q/ESC: Quit

With no arguments the demo plays refuel_port.mp4 with the preset box for
that video.
"""

import sys
import logging
import argparse

# Add src to path
from pathlib import Path

sys.path.insert(0, str(Path(__file__).resolve().parent / "src"))

from porttracker.demo import DemoConfig, PortTrackerDemo
from porttracker.tracker_core import AVAILABLE_TRACKERS
from porttracker.video_pipeline import parse_source


def build_config(args: argparse.Namespace) -> DemoConfig:
    """Apply command-line overrides to the default config."""
    config = DemoConfig()

    if args.source is not None:
        source = parse_source(args.source, default_device=config.device_index)
        if isinstance(source, int):
            config.use_live_device = True
            config.device_index = source
        else:
            config.video_path = source

    config.select_roi = args.select_roi
    config.tracker_name = args.tracker
    config.annotate_circles = not args.no_circles
    return config


def main() -> int:
    """Main entry point."""
    parser = argparse.ArgumentParser(
        description="Port Tracker - KCF Tracking Demo",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Controls:
  ANY KEY      Confirm the initial box on the first frame
  Q/ESC        Quit

Examples:
  python main_demo.py                          # refuel_port.mp4, preset box
  python main_demo.py --source camera          # Live camera (device 1)
  python main_demo.py --source 0               # Live camera, device 0
  python main_demo.py --source clip.mp4 --select-roi
  python main_demo.py --tracker csrt           # Swap tracking algorithm
        """
    )

    parser.add_argument(
        "--source", "-s",
        default=None,
        help="Video source: 'camera', camera index (0, 1, ...) or file path"
    )
    parser.add_argument(
        "--select-roi",
        action="store_true",
        help="Drag the target box on the first frame instead of using the preset"
    )
    parser.add_argument(
        "--tracker",
        choices=list(AVAILABLE_TRACKERS),
        default="kcf",
        help="Tracking algorithm"
    )
    parser.add_argument(
        "--no-circles",
        action="store_true",
        help="Disable circle highlighting"
    )
    parser.add_argument(
        "--log-level",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        default="INFO",
        help="Logging level"
    )

    args = parser.parse_args()

    # Setup logging
    logging.basicConfig(
        level=getattr(logging, args.log_level),
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s"
    )

    config = build_config(args)

    # Print banner
    print("\n" + "=" * 60)
    print("  Port Tracker")
    print("  KCF Tracking Demo")
    print("=" * 60)
    print(f"  Source: {config.resolve_source()}")
    print(f"  Tracker: {config.tracker_name.upper()}")
    print(f"  Circles: {'Enabled' if config.annotate_circles else 'Disabled'}")
    print("=" * 60)
    print("\n  Press any key on the first frame to start tracking.")
    print("  Press Q or ESC to quit.\n")

    demo = PortTrackerDemo(config)
    return demo.run()


if __name__ == "__main__":
    sys.exit(main())
