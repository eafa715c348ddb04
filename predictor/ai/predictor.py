import json
import logging
from typing import Any, Dict, List, Optional

import openai

from config import settings
from ..logic.constants import Tier
from ..logic.contracts import ApplicantSignal, Prediction
from .prompt_builder import build_system_prompt, build_user_prompt

logger = logging.getLogger(__name__)

# Used when the model omits a probability
DEFAULT_TIER_PROBABILITY = {
    Tier.SAFE: 90,
    Tier.MODERATE: 70,
    Tier.AMBITIOUS: 30,
}


class AIPredictor:
    """
    Alternate prediction strategy backed by an LLM.
    Returns None on any failure so the caller can fall back to the catalog.
    """

    def __init__(self, client=None, api_key: Optional[str] = None, model: Optional[str] = None):
        self.api_key = api_key if api_key is not None else settings.OPENAI_API_KEY
        self.client = client
        if self.client is None and self.api_key:
            self.client = openai.OpenAI(api_key=self.api_key)

        self.model = model or settings.OPENAI_MODEL
        self.max_tokens = 1200
        self.temperature = 0.2

    @property
    def available(self) -> bool:
        return self.client is not None

    def predict(self, signal: ApplicantSignal) -> Optional[List[Prediction]]:
        if not self.client:
            logger.warning("OpenAI API key not found. Skipping AI predictions.")
            return None

        try:
            response = self.client.chat.completions.create(
                model=self.model,
                messages=[
                    {"role": "system", "content": build_system_prompt()},
                    {"role": "user", "content": build_user_prompt(signal.model_dump(mode="json"))},
                ],
                temperature=self.temperature,
                max_tokens=self.max_tokens,
                response_format={"type": "json_object"},
            )
            if not response.choices:
                logger.error("OpenAI returned no choices for college predictions")
                return None
            content = response.choices[0].message.content
        except openai.OpenAIError as e:
            logger.error(f"OpenAI college predictions failed: {e}")
            return None
        except Exception as e:
            logger.error(f"Error generating AI college predictions: {e}")
            return None

        if not content:
            return None

        try:
            parsed = json.loads(content)
        except json.JSONDecodeError as e:
            logger.error(f"AI predictions were not valid JSON: {e}")
            return None

        try:
            return parse_predictions(parsed)
        except Exception as e:
            logger.error(f"Could not read AI predictions: {e}")
            return None


def _parse_tier(value: Any) -> Optional[Tier]:
    text = str(value or "").strip().lower()
    for tier in Tier:
        if tier.value.lower() == text:
            return tier
    return None


def parse_predictions(payload: Dict[str, Any]) -> List[Prediction]:
    """Convert the model's JSON into Prediction objects, skipping malformed items."""
    items = payload.get("predictions") if isinstance(payload, dict) else None
    if not isinstance(items, list):
        return []

    predictions = []
    for item in items:
        if not isinstance(item, dict) or not item.get("college"):
            continue
        tier = _parse_tier(item.get("category"))
        if tier is None:
            continue

        try:
            probability = int(round(float(item.get("probability"))))
        except (TypeError, ValueError, OverflowError):
            probability = DEFAULT_TIER_PROBABILITY[tier]

        predictions.append(Prediction(
            institution_name=str(item["college"]),
            city=str(item.get("city") or ""),
            state=str(item.get("state") or ""),
            program=str(item["program"]) if item.get("program") else None,
            tier=tier,
            probability=max(0, min(100, probability)),
            reason=str(item.get("reason") or "AI estimate"),
        ))

    return predictions
