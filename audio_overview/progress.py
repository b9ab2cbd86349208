"""
Stage events emitted by the pipeline.

The pipeline announces each stage before it starts; subscribers decide how
(or whether) to display it.
"""

import logging
from enum import Enum
from typing import Callable, List, Optional

logger = logging.getLogger(__name__)

ProgressCallback = Callable[[str], None]


class Stage(Enum):
    BLUEPRINT = "Designing episode blueprint..."
    DIALOGUE = "Writing script & performing 2-host simulation..."
    VALIDATION = "Validating citations and evidence..."
    SYNTHESIS = "Synthesizing voices..."

    @property
    def message(self) -> str:
        return self.value


class ProgressEmitter:
    """Ordered fan-out of stage events to subscribed callbacks."""

    def __init__(self, callback: Optional[ProgressCallback] = None):
        self._subscribers: List[ProgressCallback] = []
        self.emitted: List[Stage] = []
        if callback is not None:
            self.subscribe(callback)

    def subscribe(self, callback: ProgressCallback) -> None:
        self._subscribers.append(callback)

    def emit(self, stage: Stage) -> None:
        self.emitted.append(stage)
        logger.info("[%d] %s", len(self.emitted), stage.message)
        for callback in self._subscribers:
            try:
                callback(stage.message)
            except Exception as e:
                logger.warning("  Progress subscriber %r failed: %s", callback, e)
