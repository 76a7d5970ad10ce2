"""Evidence gate: mark answers that are not backed by any citation."""

import logging
from dataclasses import dataclass
from typing import Sequence

from .models import Citation

logger = logging.getLogger(__name__)

INFERENCE_MARKER = "[INFERENCE - No Direct Evidence Found]"
_MARKER_PREFIX = "[INFERENCE"


@dataclass(frozen=True)
class GateOutcome:
    text: str
    has_direct_evidence: bool
    marker_conflict: bool = False


def has_inference_marker(text: str) -> bool:
    return text.lstrip().startswith(_MARKER_PREFIX)


def apply_evidence_gate(citations: Sequence[Citation], answer_text: str) -> GateOutcome:
    """
    Enforce the inference marker post-condition on generated answer text.

    Without citations the text must lead with the marker, which is
    prepended when absent. With citations the marker must be absent; a
    marker that is present anyway is logged and reported, never stripped.
    """
    has_direct_evidence = len(citations) > 0

    if not has_direct_evidence:
        if has_inference_marker(answer_text):
            return GateOutcome(answer_text, False)
        return GateOutcome(f"{INFERENCE_MARKER}\n\n{answer_text}", False)

    if has_inference_marker(answer_text):
        logger.error(
            "Answer carries the inference marker despite %d citation(s)",
            len(citations),
        )
        return GateOutcome(answer_text, True, marker_conflict=True)

    return GateOutcome(answer_text, True)
