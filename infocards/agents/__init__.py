"""AI Agents package."""

from infocards.agents.tag_agent import (
    AttemptPlan,
    TagAgent,
    build_prompt,
)
from infocards.agents.transports import (
    GeminiTransport,
    RestTransport,
    SdkTransport,
)

__all__ = [
    "AttemptPlan",
    "GeminiTransport",
    "RestTransport",
    "SdkTransport",
    "TagAgent",
    "build_prompt",
]
