"""Response-shape inference: returned array literal -> typed fields."""

from ruletype.response.expressions import (
    EXPRESSION_RULES,
    ExpressionRule,
    ResourceNaming,
    infer_type,
    is_optional_expression,
)
from ruletype.response.extractor import (
    ExpressionEntry,
    extract_returned_structure,
    parse_entries,
    segment_entries,
)
from ruletype.response.inferencer import infer_response_fields

__all__ = [
    "EXPRESSION_RULES",
    "ExpressionEntry",
    "ExpressionRule",
    "ResourceNaming",
    "extract_returned_structure",
    "infer_response_fields",
    "infer_type",
    "is_optional_expression",
    "parse_entries",
    "segment_entries",
]
