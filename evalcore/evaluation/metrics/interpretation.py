"""
Metric Interpretation.

Maps metric values to short qualitative readings.
"""

from collections.abc import Sequence

# (lower bound, label) pairs, highest bound first
Bands = Sequence[tuple[float, str]]

_RATE_BANDS: dict[str, Bands] = {
    "accuracy": ((0.9, "Excellent accuracy"), (0.8, "Good accuracy"), (0.7, "Acceptable accuracy"), (0.6, "Poor accuracy")),
    "precision": ((0.9, "Excellent precision"), (0.8, "Good precision"), (0.7, "Acceptable precision")),
    "recall": ((0.9, "Excellent recall"), (0.8, "Good recall"), (0.7, "Acceptable recall")),
    "f1_score": ((0.9, "Excellent F1 score"), (0.8, "Good F1 score"), (0.7, "Acceptable F1 score")),
    "specificity": ((0.9, "Excellent specificity"), (0.8, "Good specificity"), (0.7, "Acceptable specificity")),
    "mcc": (
        (0.8, "Very strong correlation"),
        (0.6, "Strong correlation"),
        (0.4, "Moderate correlation"),
        (0.2, "Weak correlation"),
    ),
    "consistency": ((0.9, "Very consistent"), (0.8, "Consistent"), (0.7, "Moderately consistent")),
    "reliability": ((0.9, "Very reliable"), (0.8, "Reliable"), (0.7, "Moderately reliable")),
    "validity": ((0.9, "Very valid"), (0.8, "Valid"), (0.7, "Moderately valid")),
    "robustness": ((0.9, "Very robust"), (0.8, "Robust"), (0.7, "Moderately robust")),
    "throughput": ((10, "High throughput"), (5, "Moderate throughput"), (1, "Low throughput")),
}

_FLOOR_LABELS = {
    "accuracy": "Very poor accuracy",
    "precision": "Poor precision",
    "recall": "Poor recall",
    "f1_score": "Poor F1 score",
    "specificity": "Poor specificity",
    "mcc": "Very weak or no correlation",
    "consistency": "Inconsistent",
    "reliability": "Unreliable",
    "validity": "Invalid",
    "robustness": "Not robust",
    "throughput": "Very low throughput",
}


def interpret(metric: str, value: float) -> str:
    """Reading for a higher-is-better metric."""
    for bound, label in _RATE_BANDS[metric]:
        if value >= bound:
            return label
    return _FLOOR_LABELS[metric]


def interpret_latency(milliseconds: float) -> str:
    if milliseconds <= 100:
        return "Very low latency"
    if milliseconds <= 500:
        return "Low latency"
    if milliseconds <= 1000:
        return "Moderate latency"
    if milliseconds <= 5000:
        return "High latency"
    return "Very high latency"


def interpret_correlation_strength(magnitude: float) -> str:
    if magnitude >= 0.8:
        return "very strong"
    if magnitude >= 0.6:
        return "strong"
    if magnitude >= 0.4:
        return "moderate"
    return "weak"


def interpret_effect_size(effect_size: float, improvement: float) -> str:
    magnitude = abs(effect_size)
    if magnitude < 0.2:
        label = "Negligible difference"
    elif magnitude < 0.5:
        label = "Small difference"
    elif magnitude < 0.8:
        label = "Medium difference"
    else:
        label = "Large difference"

    if improvement > 0:
        label += " (improvement)"
    elif improvement < 0:
        label += " (degradation)"
    return label
