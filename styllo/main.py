import argparse
import json
import sys
import traceback

from styllo.config import Config
from styllo.core.logging_setup import setup_logging
from styllo.utils.exceptions import CameraError, DetectionError, FaceModelError


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="styllo", description="Skin tone detection from photos or a camera")
    parser.add_argument("--config", default=Config.CONFIG_FILE, help="path to a JSON configuration file")
    sub = parser.add_subparsers(dest="command", required=True)

    analyze = sub.add_parser("analyze", help="analyze a photo")
    analyze.add_argument("image", help="image file to analyze")
    analyze.add_argument("--detailed", action="store_true", help="include the undertone")
    analyze.add_argument("--seed", type=int, default=None, help="seed for k-means initialisation")
    analyze.add_argument("--json", action="store_true", help="print the result as JSON")

    sub.add_parser("live", help="start live camera capture")
    return parser


def run_analyze(args, config: Config) -> int:
    from styllo.face_detection.face_detector import MediaPipeFaceDetector
    from styllo.skin_detector.skin_tone_detector import SkinToneDetector

    detector = MediaPipeFaceDetector(config)
    skin_detector = SkinToneDetector(config, detector, random_state=args.seed)
    try:
        result = skin_detector.analyze(args.image, detailed=args.detailed)
    except DetectionError as e:
        print(f"[ERROR] {e.user_message}")
        return 1
    finally:
        detector.close()

    if args.json:
        print(json.dumps(result.to_dict(), indent=2))
    else:
        print(f"Skin tone:  {result.tone.value}")
        if result.undertone is not None:
            print(f"Undertone:  {result.undertone.value}")
        print(f"Confidence: {result.confidence:.2f}")
        print(f"RGB:        {result.rgb}")
        print(f"LAB:        L={result.lab.L:.1f} a={result.lab.a:.1f} b={result.lab.b:.1f}")
        print(f"Pixels:     {result.pixel_count}")
    return 0


def run_live(config: Config) -> int:
    from styllo.app.live_capture import LiveCaptureApp

    return 0 if LiveCaptureApp(config).run() else 1


def main(argv=None):
    """Main entry point"""
    args = build_parser().parse_args(argv)
    config = Config.load(args.config)
    setup_logging(config.LOGS_DIR, config.LOG_LEVEL)

    try:
        if args.command == "analyze":
            sys.exit(run_analyze(args, config))
        sys.exit(run_live(config))

    except KeyboardInterrupt:
        print("\n[INFO] Interrupted by user")
        sys.exit(0)
    except CameraError as e:
        print(f"[ERROR] Camera error: {e}")
        print("[INFO] Please check camera connection and permissions")
        sys.exit(1)
    except FaceModelError as e:
        print(f"[ERROR] {e}")
        print("[INFO] Please install required packages: pip install opencv-python mediapipe numpy scikit-learn")
        sys.exit(1)
    except Exception as e:
        print(f"[CRITICAL] Unexpected error: {e}")
        traceback.print_exc()
        sys.exit(1)


if __name__ == "__main__":
    main()
