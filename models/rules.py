from dataclasses import dataclass
from typing import Optional

# Known directive categories; loaders warn about anything else
DIRECTIVE_CATEGORIES = (
    "instruction_override",
    "command_execution",
    "data_exfiltration",
    "ai_prompt_framing",
    "credential_marker",
)


@dataclass(frozen=True)
class DirectivePattern:
    """A phrase pattern signaling an attempt to redirect an AI agent."""
    category: str # e.g., 'instruction_override', 'data_exfiltration'
    pattern: str # Regex, matched case-insensitively
    description: Optional[str] = None
