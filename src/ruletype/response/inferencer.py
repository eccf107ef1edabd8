"""Turn a response builder's source into an ordered list of typed fields."""

from __future__ import annotations

import logging
from typing import Optional

from ruletype.models import InferredField
from ruletype.response.expressions import (
    ResourceNaming,
    infer_type,
    is_optional_expression,
)
from ruletype.response.extractor import extract_returned_structure, segment_entries

logger = logging.getLogger(__name__)


def infer_response_fields(
    source: str,
    companion_types: Optional[dict[str, str]] = None,
    naming: Optional[ResourceNaming] = None,
) -> Optional[list[InferredField]]:
    """Infer the fields of the array literal returned by *source*.

    Args:
        source: Text of the response-building function.
        companion_types: Companion type per key, used as a fallback when an
            expression is not recognised.
        naming: Resource naming conventions passed to :func:`infer_type`.

    Returns:
        Fields in literal order, or ``None`` when no returned structure
        could be extracted. An empty literal yields an empty list.
    """
    structure = extract_returned_structure(source)
    if structure is None:
        logger.debug("No returned array literal found")
        return None

    companion_types = companion_types or {}
    fields: list[InferredField] = []
    for key, expression in segment_entries(structure).items():
        fields.append(
            InferredField(
                name=key,
                type=infer_type(expression, companion_types.get(key), naming),
                optional=is_optional_expression(expression),
            )
        )
    return fields
