"""Tunable parameters for tempo induction and beat tracking agents.

All values are carried by a single immutable `TrackingConfig`. It is passed
into induction and agent creation and handed unchanged to every forked agent,
so one run never mixes parameter sets.

Range checks are advisory: `TrackingConfig.range_warnings()` reports suspicious
values but nothing in the tracker refuses to run with them.
"""

from __future__ import annotations

from dataclasses import dataclass

# Agent acceptance windows, as fractions of the beat period
POST_MARGIN_FACTOR = 0.3
PRE_MARGIN_FACTOR = 0.15
# Maximum deviation (seconds) from the predicted beat without forking
INNER_MARGIN = 0.040
# Maximum tempo drift, as a fraction of the initial beat period
MAX_CHANGE = 0.2
# Slope of the penalty for onsets away from the predicted beat
CONF_FACTOR = 0.5
CORRECTION_FACTOR = 50.0
EXPIRY_TIME = 10.0

# Induction
CLUSTER_WIDTH = 0.025
MIN_IOI = 0.070
MAX_IOI = 2.500
MIN_IBI = 0.3  # 200 BPM
MAX_IBI = 1.0  # 60 BPM
TOP_N = 10

# Duplicate pruning thresholds (tempo and phase)
DUP_BEAT_INTERVAL = 0.02
DUP_BEAT_TIME = 0.04

# New-phase agents are only injected this early in the piece
PHASE_DIVERSIFY_WINDOW = 5.0


@dataclass(frozen=True)
class TrackingConfig:
    """Immutable parameter set shared by induction, agents and the roster."""

    post_margin_factor: float = POST_MARGIN_FACTOR
    pre_margin_factor: float = PRE_MARGIN_FACTOR
    inner_margin: float = INNER_MARGIN
    max_change: float = MAX_CHANGE
    conf_factor: float = CONF_FACTOR
    correction_factor: float = CORRECTION_FACTOR
    expiry_time: float = EXPIRY_TIME
    # Exponential-memory scoring for a real-time mode; 0 keeps plain summation
    decay_factor: float = 0.0
    cluster_width: float = CLUSTER_WIDTH
    min_ioi: float = MIN_IOI
    max_ioi: float = MAX_IOI
    min_ibi: float = MIN_IBI
    max_ibi: float = MAX_IBI
    top_n: int = TOP_N
    dup_beat_interval: float = DUP_BEAT_INTERVAL
    dup_beat_time: float = DUP_BEAT_TIME
    use_average_salience: bool = False
    phase_diversify_window: float = PHASE_DIVERSIFY_WINDOW

    def range_warnings(self) -> list[str]:
        """Return human-readable warnings for values outside their sane ranges.

        Returns:
            List of warning messages; empty when every value looks reasonable.
        """
        warnings: list[str] = []
        for name in (
            "post_margin_factor",
            "pre_margin_factor",
            "inner_margin",
            "max_change",
            "expiry_time",
            "cluster_width",
            "min_ioi",
            "min_ibi",
        ):
            value = getattr(self, name)
            if value <= 0:
                warnings.append(f"{name} should be positive, got {value}")
        if self.correction_factor <= 0:
            warnings.append(f"correction_factor should be positive, got {self.correction_factor}")
        if not 0 <= self.conf_factor <= 1:
            warnings.append(f"conf_factor should be within [0, 1], got {self.conf_factor}")
        if self.decay_factor < 0:
            warnings.append(f"decay_factor should be non-negative, got {self.decay_factor}")
        if self.max_ioi <= self.min_ioi:
            warnings.append(f"max_ioi ({self.max_ioi}) should exceed min_ioi ({self.min_ioi})")
        if self.max_ibi < 2 * self.min_ibi:
            warnings.append(
                f"max_ibi ({self.max_ibi}) should be at least twice min_ibi ({self.min_ibi}) "
                "for octave correction to land in range"
            )
        if self.top_n < 1:
            warnings.append(f"top_n should be at least 1, got {self.top_n}")
        if self.dup_beat_interval < 0 or self.dup_beat_time < 0:
            warnings.append("duplicate pruning thresholds should be non-negative")
        return warnings


DEFAULT_CONFIG = TrackingConfig()
