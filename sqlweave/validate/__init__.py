"""sqlweave validation layer: async per-field validator pipeline."""
from sqlweave.validate.pipeline import Validator, run_validators, validate_fields
from sqlweave.validate.validators import (
    is_type,
    matches,
    max_length,
    min_length,
    one_of,
    required,
)

__all__ = [
    "Validator",
    "run_validators",
    "validate_fields",
    "is_type",
    "matches",
    "max_length",
    "min_length",
    "one_of",
    "required",
]
