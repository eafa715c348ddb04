"""
Catalog Lookup Resolver

Finds the institutions for a (track, exam) pair with a fallback cascade:
1. Exact match on track and accepted exam
2. Case-insensitive exact match
3. Case-insensitive partial match

Each stage only runs when the previous one returned nothing. An empty
result after every stage is a valid outcome, not an error.
"""

import logging
from dataclasses import dataclass, field
from typing import List

from .catalog import CatalogReader
from .constants import MatchStage, LOOKUP_CASCADE
from .contracts import Institution

logger = logging.getLogger(__name__)


@dataclass
class LookupResult:
    institutions: List[Institution] = field(default_factory=list)
    stage: MatchStage = MatchStage.NONE

    @property
    def found(self) -> bool:
        return bool(self.institutions)


class CatalogLookupResolver:
    """Resolves catalog entries for a track/exam with progressively looser matching."""

    def __init__(self, catalog: CatalogReader):
        self.catalog = catalog

    def resolve(self, track: str, exam: str) -> LookupResult:
        for stage in LOOKUP_CASCADE:
            institutions = self.catalog.find_by_track_and_exam(track, exam, stage)
            logger.info(
                f"🔎 Lookup {stage.value}: track={track!r} exam={exam!r} -> {len(institutions)} colleges"
            )
            if institutions:
                return LookupResult(institutions=institutions, stage=stage)

        logger.warning(f"⚠️ No colleges found for track={track!r} exam={exam!r}")
        return LookupResult()
