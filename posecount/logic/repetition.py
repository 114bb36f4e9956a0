from __future__ import annotations

from enum import Enum

from posecount.utils.structures import ClassificationResult


class RepState(str, Enum):
    ENTERED = "entered"
    EXITED = "exited"


class RepetitionCounter:
    """Counts repetitions of one pose class with enter/exit hysteresis.

    A rep is counted when the confidence drops back to ``exit_threshold``
    after having reached ``enter_threshold``, so a held pose counts once.
    """

    def __init__(self, class_name: str, enter_threshold: float = 0.6, exit_threshold: float = 0.4) -> None:
        if enter_threshold <= exit_threshold:
            raise ValueError(
                f"enter_threshold ({enter_threshold}) must be greater than exit_threshold ({exit_threshold})"
            )
        self.class_name = class_name
        self.enter_threshold = enter_threshold
        self.exit_threshold = exit_threshold
        self.state = RepState.EXITED
        self.num_repeats = 0

    def add_classification_result(self, result: ClassificationResult) -> int:
        confidence = result.get_confidence(self.class_name)
        if self.state == RepState.EXITED:
            if confidence >= self.enter_threshold:
                self.state = RepState.ENTERED
            return self.num_repeats
        if confidence <= self.exit_threshold:
            self.num_repeats += 1
            self.state = RepState.EXITED
        return self.num_repeats
