from __future__ import annotations

import argparse
from pathlib import Path
from typing import Iterator, Optional, Tuple

from loguru import logger

from posecount.logic.classifier import PoseClassifier
from posecount.logic.embedding import PoseEmbedder
from posecount.logic.geometry import NUM_LANDMARKS
from posecount.logic.processor import PoseClassifierProcessor
from posecount.logic.smoothing import EMASmoothing
from posecount.models.schemas import FrameReport, ReplaySummary
from posecount.pose.samples import load_pose_samples, parse_landmark_values
from posecount.utils.config import RuntimeConfig, load_runtime_config
from posecount.utils.logging_utils import configure_logging
from posecount.utils.structures import LandmarkSet

DEFAULT_RUNTIME_CONFIG = Path("configs/runtime.yaml")
DEFAULT_SAMPLES_PATH = Path("data/fitness_pose_samples.csv")


def parse_args(argv: Optional[list] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Replay recorded pose landmarks through the classifier and rep counter")
    parser.add_argument("--runtime-config", type=Path, default=DEFAULT_RUNTIME_CONFIG, help="Runtime configuration")
    parser.add_argument("--samples", type=Path, default=None, help="Override the reference pose samples file")
    parser.add_argument("--frames", type=Path, required=True, help="Landmark frames, one delimited record per line")
    parser.add_argument("--single", action="store_true", help="Classify frames independently (no smoothing or rep counting)")
    parser.add_argument("--log-level", type=str, default=None, help="Override the configured log level")
    return parser.parse_args(argv)


def parse_frame(record: str, delimiter: str) -> Tuple[Optional[float], LandmarkSet]:
    """Parse one replay line into ``(timestamp_ms, landmarks)``.

    An empty line is a frame without a pose. A leading extra column is read as
    the frame timestamp in milliseconds; empty coordinate fields mark joints
    that were not detected.
    """
    if not record.strip():
        return None, {}
    tokens = record.rstrip("\r\n").split(delimiter)
    timestamp_ms: Optional[float] = None
    if len(tokens) in (NUM_LANDMARKS * 2 + 1, NUM_LANDMARKS * 3 + 1):
        timestamp_ms = float(tokens[0])
        tokens = tokens[1:]
    landmarks = parse_landmark_values(tokens, allow_missing=True)
    if landmarks is None:
        raise ValueError(f"Expected {NUM_LANDMARKS} landmarks with 2 or 3 coordinates, got {len(tokens)} fields")
    return timestamp_ms, landmarks


def iter_frames(path: Path, delimiter: str) -> Iterator[Tuple[Optional[float], LandmarkSet]]:
    with open(path, "r", encoding="utf-8") as f:
        for line_no, record in enumerate(f, start=1):
            try:
                yield parse_frame(record, delimiter)
            except ValueError as exc:
                logger.warning("Frame {} is malformed, treating it as no pose: {}", line_no, exc)
                yield None, {}


def build_processor(runtime_cfg: RuntimeConfig, samples_path: Path, single: bool = False) -> PoseClassifierProcessor:
    delimiter = str(runtime_cfg.samples.get("delimiter", ","))
    samples = load_pose_samples(str(samples_path), delimiter)
    classifier_cfg = runtime_cfg.classifier
    embedder = PoseEmbedder(torso_size_multiplier=float(classifier_cfg.get("torso_size_multiplier", 2.5)))
    classifier = PoseClassifier(
        samples,
        embedder=embedder,
        k=int(classifier_cfg.get("k", 10)),
        max_distance_top_k=int(classifier_cfg.get("max_distance_top_k", 30)),
        axes_weights=tuple(float(w) for w in classifier_cfg.get("axes_weights", (1.0, 1.0, 0.2))),
    )
    if single:
        return PoseClassifierProcessor(classifier, stream_mode=False)
    smoothing_cfg = runtime_cfg.smoothing
    reset_threshold = smoothing_cfg.get("reset_threshold_ms")
    smoothing = EMASmoothing(
        window_size=int(smoothing_cfg.get("window_size", 10)),
        alpha=float(smoothing_cfg.get("alpha", 0.2)),
        reset_threshold_ms=float(reset_threshold) if reset_threshold is not None else None,
    )
    rep_classes = runtime_cfg.rep_classes() or None
    return PoseClassifierProcessor(classifier, stream_mode=True, rep_classes=rep_classes, smoothing=smoothing)


def main(argv: Optional[list] = None) -> None:
    args = parse_args(argv)
    runtime_cfg = load_runtime_config(str(args.runtime_config))
    configure_logging(args.log_level or str(runtime_cfg.logging.get("level", "INFO")))

    samples_path = args.samples or Path(runtime_cfg.samples.get("path", DEFAULT_SAMPLES_PATH))
    if not samples_path.is_file():
        raise FileNotFoundError(f"Expected pose samples at {samples_path}.")
    if not args.frames.is_file():
        raise FileNotFoundError(f"Expected landmark frames at {args.frames}.")

    processor = build_processor(runtime_cfg, samples_path, single=args.single)
    delimiter = str(runtime_cfg.samples.get("delimiter", ","))
    frames = 0
    frames_with_pose = 0
    for timestamp_ms, landmarks in iter_frames(args.frames, delimiter):
        report: FrameReport = processor.process(landmarks, timestamp_ms)
        frames += 1
        frames_with_pose += int(report.pose_found)
        print(report.model_dump_json())

    summary = ReplaySummary(
        frames=frames,
        frames_with_pose=frames_with_pose,
        rep_counts=processor.rep_counts,
        last_rep_text=processor.last_rep_result,
    )
    logger.info("Replay finished: {}", summary.model_dump())


if __name__ == "__main__":
    main()
