"""Run several event detectors over one clip.

The detectors only read the frame store, so they can run side by side on a
thread pool. Each detector either contributes a result or a typed failure;
one detector failing never hides the others' results.
"""

from __future__ import annotations

import logging
from concurrent.futures import ThreadPoolExecutor, as_completed
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, Iterable, Optional, Union

from .analysis.contact import ContactPointDetector
from .analysis.handedness import HandednessResult, resolve_hand
from .analysis.landing import LandingDetector
from .analysis.swing import SwingDetector
from .analysis.swing_v2 import SwingDetectorV2
from .analysis.trophy import TrophyDetector
from .config.detector_config import DEFAULT_CONFIG, DetectorConfig
from .config.keypoints import Hand, SkeletonModel, resolve_layout
from .core.errors import DetectionError
from .core.pose_data import PoseFrames, validate_inputs
from .serialization import to_serializable

logger = logging.getLogger(__name__)

DETECTOR_NAMES = ("trophy", "contact", "landing", "swing", "swing_v2")


@dataclass
class ClipAnalysis:
    """Results and failures of one clip, keyed by detector name."""

    fps: float
    model: SkeletonModel
    results: Dict[str, Any] = field(default_factory=dict)
    failures: Dict[str, DetectionError] = field(default_factory=dict)

    @property
    def succeeded(self) -> bool:
        return not self.failures

    def to_dict(self) -> Dict[str, Any]:
        return {
            "fps": self.fps,
            "model": self.model.value,
            "results": {name: to_serializable(r) for name, r in sorted(self.results.items())},
            "failures": {name: e.to_dict() for name, e in sorted(self.failures.items())},
        }


def _build_runners(
    names: Iterable[str],
    model: SkeletonModel,
    config: DetectorConfig,
    body_index: int,
    hand: Optional[HandednessResult],
) -> Dict[str, Callable[[PoseFrames, float], Any]]:
    runners: Dict[str, Callable[[PoseFrames, float], Any]] = {}
    for name in names:
        if name == "trophy":
            det = TrophyDetector(config.trophy, model, body_index, config.handedness)
            runners[name] = lambda f, fps, d=det: d.analyze(f, fps, hand)
        elif name == "contact":
            det = ContactPointDetector(config.contact, model, body_index, config.handedness)
            runners[name] = lambda f, fps, d=det: d.analyze(f, fps, hand)
        elif name == "landing":
            runners[name] = LandingDetector(config.landing, model, body_index).analyze
        elif name == "swing":
            runners[name] = SwingDetector(config.swing, model, body_index).analyze
        elif name == "swing_v2":
            runners[name] = SwingDetectorV2(config.swing_v2, model, body_index).analyze
        else:
            raise ValueError(f"Unknown detector {name!r}; expected one of {DETECTOR_NAMES}")
    return runners


def analyze_clip(
    frames: PoseFrames,
    fps: float,
    model: Union[SkeletonModel, str] = SkeletonModel.MOVENET,
    *,
    detectors: Optional[Iterable[str]] = None,
    config: DetectorConfig = DEFAULT_CONFIG,
    body_index: int = 0,
    dominant_hand: Union[Hand, str, None] = "auto",
    max_workers: Optional[int] = None,
) -> ClipAnalysis:
    """
    Run the selected detectors (all by default) over one clip.

    The racket hand is resolved once and shared by the trophy and contact
    detectors. With ``max_workers`` > 1 detectors run concurrently.

    Raises:
        InvalidPoseInputError: empty frame store or bad fps
        NoHandednessSignalError: handedness required but unmeasurable
    """
    validate_inputs(frames, fps)
    fps = float(fps)
    layout = resolve_layout(model)
    names = tuple(detectors) if detectors is not None else DETECTOR_NAMES

    hand = None
    if "trophy" in names or "contact" in names:
        hand = resolve_hand(dominant_hand, frames, layout, body_index, config.handedness)
    runners = _build_runners(names, layout.model, config, body_index, hand)

    analysis = ClipAnalysis(fps=fps, model=layout.model)

    def run(name: str):
        try:
            return name, runners[name](frames, fps), None
        except DetectionError as e:
            return name, None, e

    if max_workers is not None and max_workers > 1:
        with ThreadPoolExecutor(max_workers=max_workers) as executor:
            futures = {executor.submit(run, name): name for name in names}
            outcomes = [future.result() for future in as_completed(futures)]
    else:
        outcomes = [run(name) for name in names]

    for name, result, error in outcomes:
        if error is not None:
            logger.info("%s: %s", name, error.message)
            analysis.failures[name] = error
        else:
            analysis.results[name] = result

    logger.info(
        "Analyzed clip: %d detector(s) succeeded, %d failed",
        len(analysis.results), len(analysis.failures),
    )
    return analysis
