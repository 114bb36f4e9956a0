from __future__ import annotations

from collections import deque
from typing import Deque, Dict, Optional

from posecount.utils.structures import ClassificationResult


class EMASmoothing:
    """Exponential moving average over the last ``window_size`` results.

    Call once per frame, including frames with an empty result, so that
    classes which stop being reported decay toward zero.
    """

    def __init__(
        self,
        window_size: int = 10,
        alpha: float = 0.2,
        reset_threshold_ms: Optional[float] = None,
    ) -> None:
        if window_size < 1:
            raise ValueError(f"window_size must be at least 1, got {window_size}")
        if not 0.0 < alpha <= 1.0:
            raise ValueError(f"alpha must be in (0, 1], got {alpha}")
        self.window_size = window_size
        self.alpha = alpha
        self.reset_threshold_ms = reset_threshold_ms
        self.window: Deque[ClassificationResult] = deque(maxlen=window_size)
        self._last_input_ms: Optional[float] = None

    def smooth(self, result: ClassificationResult, timestamp_ms: Optional[float] = None) -> ClassificationResult:
        if timestamp_ms is not None:
            if (
                self.reset_threshold_ms is not None
                and self._last_input_ms is not None
                and timestamp_ms - self._last_input_ms > self.reset_threshold_ms
            ):
                self.window.clear()
            self._last_input_ms = timestamp_ms

        # Newest first; the deque evicts the oldest from the right.
        self.window.appendleft(result)

        all_classes: Dict[str, None] = {}
        for past in self.window:
            all_classes.update(dict.fromkeys(past.classes))

        smoothed = ClassificationResult()
        for class_name in all_classes:
            factor = 1.0
            top_sum = 0.0
            bottom_sum = 0.0
            for past in self.window:
                top_sum += factor * past.get_confidence(class_name)
                bottom_sum += factor
                factor *= 1.0 - self.alpha
            smoothed.put_confidence(class_name, top_sum / bottom_sum)
        return smoothed

    def reset(self) -> None:
        self.window.clear()
        self._last_input_ms = None
