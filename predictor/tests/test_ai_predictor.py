"""
Test the AI prediction strategy with a fake OpenAI client.
"""

import sys
import os
import json
from types import SimpleNamespace
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.dirname(os.path.abspath(__file__)))))

import openai

from predictor.ai.predictor import AIPredictor, parse_predictions
from predictor.ai.prompt_builder import build_system_prompt, build_user_prompt
from predictor.logic import PredictorEngine, Tier, build_mock_catalog
from predictor.logic.engine import STRATEGY_AI
from predictor.logic.validation import build_signal


class FakeCompletions:
    def __init__(self, content=None, error=None):
        self.content = content
        self.error = error
        self.calls = []

    def create(self, **kwargs):
        self.calls.append(kwargs)
        if self.error:
            raise self.error
        message = SimpleNamespace(content=self.content)
        return SimpleNamespace(choices=[SimpleNamespace(message=message)])


def _client(content=None, error=None):
    completions = FakeCompletions(content=content, error=error)
    return SimpleNamespace(chat=SimpleNamespace(completions=completions)), completions


AI_PAYLOAD = {
    "predictions": [
        {"college": "NIT Warangal", "program": "CSE", "city": "Warangal", "state": "Telangana",
         "category": "safe", "probability": 88, "reason": "Rank well inside closing range"},
        {"college": "IIIT Hyderabad", "category": "AMBITIOUS"},
        {"college": "Unknown Tier College", "category": "Maybe", "probability": 50},
        {"college": "Overconfident College", "category": "Moderate", "probability": 150},
        {"category": "Safe", "probability": 90},
    ]
}


def test_parse_predictions():
    predictions = parse_predictions(AI_PAYLOAD)

    assert [p.institution_name for p in predictions] == [
        "NIT Warangal",
        "IIIT Hyderabad",
        "Overconfident College",
    ]
    assert predictions[0].tier == Tier.SAFE
    assert predictions[0].program == "CSE"
    assert predictions[1].probability == 30
    assert predictions[2].probability == 100


def test_parse_predictions_rejects_bad_shape():
    assert parse_predictions({"predictions": "none"}) == []
    assert parse_predictions([]) == []


def test_predict_without_client():
    predictor = AIPredictor(api_key="")
    assert not predictor.available
    assert predictor.predict(build_signal("MPC", "JEE Main", rank=1900)) is None


def test_predict_sends_signal():
    client, completions = _client(content=json.dumps(AI_PAYLOAD))
    predictor = AIPredictor(client=client, model="test-model")

    predictions = predictor.predict(build_signal("MPC", "JEE Main", rank=1900))

    assert len(predictions) == 3
    call = completions.calls[0]
    assert call["model"] == "test-model"
    assert '"rank": 1900' in call["messages"][1]["content"]


def test_predict_handles_api_error():
    client, _ = _client(error=openai.OpenAIError("boom"))
    assert AIPredictor(client=client).predict(build_signal("MPC", "JEE Main", rank=1900)) is None


def test_predict_handles_invalid_json():
    client, _ = _client(content="not json")
    assert AIPredictor(client=client).predict(build_signal("MPC", "JEE Main", rank=1900)) is None


def test_engine_ai_strategy():
    client, _ = _client(content=json.dumps(AI_PAYLOAD))
    engine = PredictorEngine(build_mock_catalog(), ai_predictor=AIPredictor(client=client))

    output = engine.predict("MPC", "JEE Main", rank=1900, strategy=STRATEGY_AI)

    assert output.source == "ai"
    assert output.summary.total_predictions == 3
    assert [p.institution_name for p in output.safe] == ["NIT Warangal"]


def test_engine_ai_strategy_falls_back_to_catalog():
    client, _ = _client(content="")
    engine = PredictorEngine(
        build_mock_catalog(), ai_predictor=AIPredictor(client=client), include_reach=False
    )

    output = engine.predict("MPC", "JEE Main", rank=1900, strategy=STRATEGY_AI)

    assert output.source == "catalog"
    assert output.summary.total_predictions == 4
    assert "AI predictions unavailable; showing catalog-based predictions." in output.warnings


class EmptyChoicesCompletions(FakeCompletions):
    def create(self, **kwargs):
        self.calls.append(kwargs)
        return SimpleNamespace(choices=[])


def _catalog_engine(client):
    return PredictorEngine(
        build_mock_catalog(), ai_predictor=AIPredictor(client=client), include_reach=False
    )


def test_engine_falls_back_on_unexpected_client_error():
    client, _ = _client(error=RuntimeError("transport blew up"))
    output = _catalog_engine(client).predict("MPC", "JEE Main", rank=1900, strategy=STRATEGY_AI)

    assert output.source == "catalog"
    assert output.summary.total_predictions == 4


def test_engine_falls_back_on_empty_choices():
    client = SimpleNamespace(chat=SimpleNamespace(completions=EmptyChoicesCompletions()))
    output = _catalog_engine(client).predict("MPC", "JEE Main", rank=1900, strategy=STRATEGY_AI)

    assert output.source == "catalog"
    assert "AI predictions unavailable; showing catalog-based predictions." in output.warnings


def test_overflowing_probability_uses_tier_default():
    content = '{"predictions": [{"college": "Huge College", "category": "Moderate", "probability": 1e400}]}'
    client, _ = _client(content=content)

    predictions = AIPredictor(client=client).predict(build_signal("MPC", "JEE Main", rank=1900))

    assert [p.institution_name for p in predictions] == ["Huge College"]
    assert predictions[0].probability == 70

    output = _catalog_engine(client).predict("MPC", "JEE Main", rank=1900, strategy=STRATEGY_AI)
    assert output.source == "ai"
    assert output.moderate[0].probability == 70


def test_prompts():
    assert "OUTPUT FORMAT" in build_system_prompt()
    prompt = build_user_prompt({"track": "MEC", "exam": "CUET", "percentile": 92.5, "rank": None})
    assert '"percentile": 92.5' in prompt
    assert '"rank"' not in prompt
