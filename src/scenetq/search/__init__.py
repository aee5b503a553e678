"""Per-scene quantizer search and override emission."""

from .controller import QuantizerSearch, TrialOutcome
from .overrides import OverrideEmitter
from .quantizer import (
    TRIAL_OFFSETS,
    fit_quality_curve,
    round_quantizer,
    solve_quantizer,
    trial_quantizer,
)

__all__ = [
    'QuantizerSearch',
    'TrialOutcome',
    'OverrideEmitter',
    'TRIAL_OFFSETS',
    'fit_quality_curve',
    'round_quantizer',
    'solve_quantizer',
    'trial_quantizer',
]
