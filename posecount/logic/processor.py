from __future__ import annotations

from typing import Dict, List, Mapping, Optional, Tuple

from loguru import logger

from posecount.logic.classifier import PoseClassifier
from posecount.logic.repetition import RepetitionCounter
from posecount.logic.rules import PUSHUPS_DOWN, SQUATS_DOWN, refine
from posecount.logic.smoothing import EMASmoothing
from posecount.models.schemas import FrameReport
from posecount.utils.structures import ClassificationResult, LandmarkSet

DEFAULT_REP_CLASSES: Dict[str, Tuple[float, float]] = {
    PUSHUPS_DOWN: (0.6, 0.4),
    SQUATS_DOWN: (0.6, 0.4),
}


class PoseClassifierProcessor:
    """Runs classification, smoothing, rep counting and the label overlay per frame.

    Each instance owns its smoothing window and rep counters; the classifier
    may be shared between instances. Frames must be fed in order from a
    single thread.
    """

    def __init__(
        self,
        classifier: PoseClassifier,
        stream_mode: bool = True,
        rep_classes: Optional[Mapping[str, Tuple[float, float]]] = None,
        smoothing: Optional[EMASmoothing] = None,
        display_names: Optional[Mapping[str, str]] = None,
    ) -> None:
        self.classifier = classifier
        self.stream_mode = stream_mode
        self.display_names = display_names
        self.smoothing: Optional[EMASmoothing] = None
        self.rep_counters: List[RepetitionCounter] = []
        self.last_rep_result = ""
        self.frame_index = 0
        if stream_mode:
            self.smoothing = smoothing or EMASmoothing()
            classes = DEFAULT_REP_CLASSES if rep_classes is None else rep_classes
            for class_name, (enter_threshold, exit_threshold) in classes.items():
                self.rep_counters.append(RepetitionCounter(class_name, enter_threshold, exit_threshold))
                logger.debug(
                    "Counting reps for {} (enter={}, exit={})", class_name, enter_threshold, exit_threshold
                )

    @property
    def rep_counts(self) -> Dict[str, int]:
        return {counter.class_name: counter.num_repeats for counter in self.rep_counters}

    def process(self, landmarks: LandmarkSet, timestamp_ms: Optional[float] = None) -> FrameReport:
        frame_index = self.frame_index
        self.frame_index += 1
        pose_found = bool(landmarks)
        classification = self.classifier.classify(landmarks)

        if self.smoothing is not None:
            # Smooth even when no pose was found so old classes decay.
            classification = self.smoothing.smooth(classification, timestamp_ms)
            if pose_found:
                self._update_counters(classification)

        label: Optional[str] = None
        top_class = classification.max_confidence_class()
        if pose_found and top_class is not None:
            label = refine(top_class, landmarks, display_names=self.display_names)

        return FrameReport(
            frame_index=frame_index,
            pose_found=pose_found,
            classification=dict(classification.confidences),
            label=label,
            rep_counts=self.rep_counts,
            rep_text=self.last_rep_result,
        )

    def get_pose_result(self, landmarks: LandmarkSet) -> List[str]:
        """Formatted output: ``"<class> : <n> reps"`` in stream mode, then the display label."""
        report = self.process(landmarks)
        result: List[str] = []
        if self.stream_mode:
            result.append(report.rep_text)
        if report.label is not None:
            result.append(report.label)
        return result

    def _update_counters(self, classification: ClassificationResult) -> None:
        for counter in self.rep_counters:
            reps_before = counter.num_repeats
            reps_after = counter.add_classification_result(classification)
            if reps_after > reps_before:
                self.last_rep_result = f"{counter.class_name} : {reps_after} reps"
                logger.info("Rep completed: {}", self.last_rep_result)
                break
