from typing import Any, Dict
import json

from .safety_rules import SAFETY_RULES, SYSTEM_ROLE_DEFINITION, JSON_OUTPUT_FORMAT_INSTRUCTION


def build_system_prompt() -> str:
    """Constructs the static system prompt."""
    rules_str = "\n".join([f"- {rule}" for rule in SAFETY_RULES])

    return f"""{SYSTEM_ROLE_DEFINITION}

SAFETY RULES (NON-NEGOTIABLE):
{rules_str}

OUTPUT FORMAT:
{JSON_OUTPUT_FORMAT_INSTRUCTION}
"""


def build_user_prompt(signal: Dict[str, Any], limit: int = 15) -> str:
    """
    Constructs the user prompt from the applicant signal.
    Only the fields the prediction depends on are sent.
    """
    applicant = {
        "stream": signal.get("track"),
        "exam": signal.get("exam"),
        "rank": signal.get("rank"),
        "percentile": signal.get("percentile"),
        "category": signal.get("category"),
        "home_state": signal.get("home_state"),
    }
    applicant = {k: v for k, v in applicant.items() if v is not None}

    return f"""
APPLICANT:
{json.dumps(applicant, indent=2)}

TASK:
List up to {limit} colleges with their admission category and probability.
Adhere strictly to the safety rules.
"""
