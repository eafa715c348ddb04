"""
Scenario Sweep Engine

Re-runs the prediction aggregator for a list of hypothetical applicant
signals ("what if my rank were 2000?") and derives sensitivity insights.

A sweep honours a deadline and a cancel event between scenarios; when
either trips, the scenarios already computed are returned and the output
is marked truncated.
"""

import logging
import threading
import time
from typing import List, Optional

from .aggregator import PredictionAggregator
from .constants import Tier, TIER_ORDER, TOP_PER_TIER
from .contracts import Scenario, ScenarioResult, SweepOutput
from .output_assembler import partition_by_tier

logger = logging.getLogger(__name__)


def build_scenario_result(name: str, scenario: Scenario, predictions) -> ScenarioResult:
    by_tier = partition_by_tier(predictions)
    return ScenarioResult(
        scenario=name,
        signal=scenario.signal,
        predictions={
            tier.value.lower(): by_tier[tier][:TOP_PER_TIER] for tier in TIER_ORDER
        },
        counts={tier.value.lower(): len(by_tier[tier]) for tier in TIER_ORDER},
        total_options=len(predictions),
        best_option=predictions[0] if predictions else None,
    )


def generate_insights(results: List[ScenarioResult]) -> List[str]:
    """Compare the first two scenarios; undefined for fewer than two."""
    insights: List[str] = []
    if len(results) < 2:
        return insights

    first, second = results[0], results[1]
    ambitious_key = Tier.AMBITIOUS.value.lower()
    safe_key = Tier.SAFE.value.lower()

    delta = second.counts.get(ambitious_key, 0) - first.counts.get(ambitious_key, 0)
    if delta > 0:
        insights.append(
            f"Improving your score could open {delta} more ambitious college options"
        )
    elif delta < 0:
        insights.append(
            f"'{second.scenario}' has {-delta} fewer ambitious options than "
            f"'{first.scenario}' as colleges move into safer tiers or out of reach"
        )
    else:
        insights.append(
            f"Ambitious options stay the same between '{first.scenario}' and '{second.scenario}'"
        )

    safe_delta = second.counts.get(safe_key, 0) - first.counts.get(safe_key, 0)
    if safe_delta > 0:
        insights.append(f"'{second.scenario}' adds {safe_delta} safe college options")
    elif safe_delta < 0:
        insights.append(f"'{second.scenario}' has {-safe_delta} fewer safe college options")

    return insights


class ScenarioSweepEngine:
    """Runs what-if sweeps over hypothetical applicant signals."""

    def __init__(self, aggregator: PredictionAggregator):
        self.aggregator = aggregator

    def sweep(
        self,
        scenarios: List[Scenario],
        deadline_seconds: Optional[float] = None,
        cancel_event: Optional[threading.Event] = None,
    ) -> SweepOutput:
        """
        Evaluate every scenario in order.

        Args:
            scenarios: Named hypothetical signals
            deadline_seconds: Stop starting new scenarios after this long
            cancel_event: Stop starting new scenarios once set

        Returns:
            SweepOutput with per-scenario results, insights and truncation flag
        """
        started = time.monotonic()
        results: List[ScenarioResult] = []
        truncated = False

        for index, scenario in enumerate(scenarios):
            if cancel_event is not None and cancel_event.is_set():
                truncated = True
                break
            if deadline_seconds is not None and time.monotonic() - started > deadline_seconds:
                truncated = True
                break

            name = scenario.name or f"Scenario {index + 1}"
            aggregation = self.aggregator.aggregate(scenario.signal)
            results.append(build_scenario_result(name, scenario, aggregation.predictions))

        warnings = []
        if truncated:
            message = (
                f"What-if sweep stopped after {len(results)} of {len(scenarios)} scenarios"
            )
            logger.warning(f"⏱️ {message}")
            warnings.append(message)

        return SweepOutput(
            scenarios=results,
            insights=generate_insights(results),
            truncated=truncated,
            warnings=warnings,
        )
