"""
Recovery of structured chart data from free-form LLM replies.

The model is asked to append a chart description between two sentinel
lines::

    ###VISUALIZATION###
    {"type": "bar", "title": "...", "data": [{"name": "...", "value": 1}]}
    ###END_VISUALIZATION###

Extraction never raises: when the block is missing or malformed the
caller gets the full reply back as narrative and no chart.
"""

import json
import logging

from pydantic import ValidationError

from dto.visualization import ExtractionResult, VisualizationSpec

logger = logging.getLogger(__name__)

VISUALIZATION_START = "###VISUALIZATION###"
VISUALIZATION_END = "###END_VISUALIZATION###"


def extract_visualization(raw: str) -> ExtractionResult:
    """
    Split *raw* into narrative text and an optional ``VisualizationSpec``.

    Only the first start marker and the first end marker after it are
    considered. On success the whole delimited region, markers included,
    is removed from the narrative. If the block does not parse or does
    not have the expected shape the reply is returned untouched, block
    and all.
    """
    start = raw.find(VISUALIZATION_START)
    if start == -1:
        return ExtractionResult(narrative=raw)
    body_start = start + len(VISUALIZATION_START)
    end = raw.find(VISUALIZATION_END, body_start)
    if end == -1:
        logger.debug("Visualization start marker without end marker")
        return ExtractionResult(narrative=raw)

    payload = raw[body_start:end]
    try:
        spec = VisualizationSpec.model_validate(json.loads(payload))
    except ValidationError as exc:
        logger.warning(
            "Visualization block has the wrong shape (%d error(s)): %s",
            exc.error_count(),
            payload[:200],
        )
        return ExtractionResult(narrative=raw)
    except (ValueError, RecursionError) as exc:
        # ValidationError is a ValueError too, so it is matched first above.
        logger.warning("Failed to parse visualization JSON: %s (%s)", exc, payload[:200])
        return ExtractionResult(narrative=raw)

    narrative = (raw[:start] + raw[end + len(VISUALIZATION_END):]).strip()
    return ExtractionResult(narrative=narrative, visualization=spec)
