# Export all catalog models for easy imports
from .base import Base
from .college import PredCollege
from .branch import PredBranch
from .cutoff import PredCutoff

__all__ = [
    "Base",
    "PredCollege",
    "PredBranch",
    "PredCutoff",
]
