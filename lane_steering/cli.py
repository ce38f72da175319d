import argparse
import logging
from pathlib import Path

import cv2

from .config import DEFAULT_HEIGHT, DEFAULT_WIDTH
from .detector import LaneDetector
from .errors import ConfigurationError
from .pipeline import generate_synthetic_road

logger = logging.getLogger(__name__)


def _build_detector(args: argparse.Namespace) -> LaneDetector:
    if args.config is not None:
        return LaneDetector.from_file(args.config, weight=args.weight)
    return LaneDetector(weight=args.weight)


def _cmd_generate(args: argparse.Namespace) -> int:
    img = generate_synthetic_road(width=args.width, height=args.height, offset_px=args.offset)
    args.output.parent.mkdir(parents=True, exist_ok=True)
    cv2.imwrite(str(args.output), img)
    print(f"Wrote synthetic image to {args.output}")
    return 0


def _cmd_detect(args: argparse.Namespace) -> int:
    img = cv2.imread(str(args.image))
    if img is None:
        raise FileNotFoundError(f"Could not read image: {args.image}")

    detector = _build_detector(args)
    res = detector.update(img)

    args.output.parent.mkdir(parents=True, exist_ok=True)
    cv2.imwrite(str(args.output), res.overlay)
    print(f"Wrote overlay to {args.output}")

    if args.save_edges:
        args.save_edges.parent.mkdir(parents=True, exist_ok=True)
        cv2.imwrite(str(args.save_edges), res.edges)
        print(f"Wrote edges to {args.save_edges}")

    print("Left lane:", "N/A" if res.left_lane is None else tuple(round(v, 1) for v in res.left_lane))
    print("Right lane:", "N/A" if res.right_lane is None else tuple(round(v, 1) for v in res.right_lane))
    print(f"Steering error: {detector.steering_error():.2f}°")
    return 0


def _cmd_video(args: argparse.Namespace) -> int:
    cap = cv2.VideoCapture(str(args.video))
    if not cap.isOpened():
        raise FileNotFoundError(f"Could not open video: {args.video}")

    detector = _build_detector(args)
    writer = None
    if args.output:
        args.output.parent.mkdir(parents=True, exist_ok=True)
        fps = cap.get(cv2.CAP_PROP_FPS) or 30.0
        fourcc = cv2.VideoWriter_fourcc(*"mp4v")
        writer = cv2.VideoWriter(str(args.output), fourcc, fps, (detector.width, detector.height))

    frame_idx = 0
    try:
        while True:
            ok, frame = cap.read()
            if not ok:
                break
            res = detector.update(frame)
            if writer is not None:
                writer.write(res.overlay)
            print(f"{frame_idx}\t{res.steering_angle:.2f}")
            frame_idx += 1
    finally:
        cap.release()
        if writer is not None:
            writer.release()

    logger.info("Processed %d frames from %s", frame_idx, args.video)
    if writer is not None:
        print(f"Wrote overlay video to {args.output}")
    return 0


def main() -> int:
    p = argparse.ArgumentParser(description="Lane tracking and steering error (OpenCV)")
    p.add_argument("-v", "--verbose", action="store_true", help="Log per-frame decisions")
    sub = p.add_subparsers(dest="cmd", required=True)

    g = sub.add_parser("generate", help="Generate a synthetic road image")
    g.add_argument("--output", type=Path, required=True)
    g.add_argument("--width", type=int, default=DEFAULT_WIDTH)
    g.add_argument("--height", type=int, default=DEFAULT_HEIGHT)
    g.add_argument("--offset", type=int, default=0, help="pixels to shift the lane sideways")
    g.set_defaults(func=_cmd_generate)

    common = argparse.ArgumentParser(add_help=False)
    common.add_argument("--config", type=Path, default=None, help="YAML/JSON detector config")
    common.add_argument("--weight", type=float, default=10.0, help="Segment length per clustering vote (0 disables)")

    d = sub.add_parser("detect", parents=[common], help="Detect lanes and steering error on an image")
    d.add_argument("--image", type=Path, required=True)
    d.add_argument("--output", type=Path, default=Path("outputs/overlay.png"))
    d.add_argument("--save-edges", type=Path, help="Optional path to save the masked edge image")
    d.set_defaults(func=_cmd_detect)

    v = sub.add_parser("video", parents=[common], help="Print the steering error for every frame of a video")
    v.add_argument("--video", type=Path, required=True)
    v.add_argument("--output", type=Path, help="Optional path for an overlay video")
    v.set_defaults(func=_cmd_video)

    args = p.parse_args()
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    try:
        return int(args.func(args))
    except ConfigurationError as exc:
        logger.error("Invalid configuration: %s", exc)
        return 2


if __name__ == "__main__":
    raise SystemExit(main())
