"""
Tagging Package

Heuristic enrichment, model-output parsing, the tag gate and the remote
tagging client.
"""

from infocards.tagging.enrichment import (
    enrich,
    heuristic_result,
    normalize_draft_text,
)
from infocards.tagging.gate import accept
from infocards.tagging.parsing import (
    MalformedOutput,
    ParsedOutput,
    extract_balanced_object,
    parse_model_output,
)
from infocards.tagging.remote import RemoteTagClient

__all__ = [
    "MalformedOutput",
    "ParsedOutput",
    "RemoteTagClient",
    "accept",
    "enrich",
    "extract_balanced_object",
    "heuristic_result",
    "normalize_draft_text",
    "parse_model_output",
]
