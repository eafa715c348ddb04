"""
Predictor Errors

Only request-level problems are raised; catalog misses and unparsable
cutoff text are recovered inside the engine.
"""

from typing import Optional


class PredictionValidationError(ValueError):
    """Missing or invalid request field."""

    def __init__(self, message: str, field: Optional[str] = None):
        super().__init__(message)
        self.message = message
        self.field = field


class InstitutionNotFound(LookupError):
    """Requested institution id is not in the catalog."""

    def __init__(self, institution_id: str):
        super().__init__(f"College not found: {institution_id}")
        self.institution_id = institution_id
