from .anomaly import AnomalyDetector, AnomalyResult
from .correlation import CorrelationAnalyzer, CorrelationResult
from .engine import TrendEngine
from .forecast import Forecaster, Prediction
from .report import DashboardMetrics, QualityTrend, TrendReport, TrendReportBuilder
from .statistics import ParameterStats, StatisticsEngine
from .trend import TrendDetector, TrendResult

__all__ = [
    "AnomalyDetector", "AnomalyResult",
    "CorrelationAnalyzer", "CorrelationResult",
    "TrendEngine",
    "Forecaster", "Prediction",
    "DashboardMetrics", "QualityTrend", "TrendReport", "TrendReportBuilder",
    "ParameterStats", "StatisticsEngine",
    "TrendDetector", "TrendResult",
]
