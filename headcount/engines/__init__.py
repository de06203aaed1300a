"""Core business-logic engines."""

from headcount.engines.aggregation_engine import AggregationEngine, ReferenceMonth
from headcount.engines.anomaly_detector import AnomalyDetector

__all__ = [
    "AggregationEngine",
    "AnomalyDetector",
    "ReferenceMonth",
]
