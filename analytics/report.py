"""Composes the analytics components into point-in-time trend reports and dashboard metrics."""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Sequence

from analytics.anomaly import AnomalyDetector, AnomalyResult
from analytics.correlation import CorrelationAnalyzer, CorrelationResult
from analytics.forecast import Forecaster, Prediction
from analytics.quality import QualityScorer, score_readings
from analytics.statistics import ParameterStats, StatisticsEngine
from analytics.trend import TrendDetector
from ingest.schemas import TRACKED_PARAMETERS, TimeWindow
from storage.history import HistoryStore

ALERT_SCORE_THRESHOLD = 60
MIN_QUALITY_SCORES = 5
RAPID_DECLINE_RATE = 1.0


@dataclass
class Recommendation:
    priority: str  # "critical" | "high" | "low"
    action: str


@dataclass
class QualityTrend:
    trend: str
    message: str
    change_rate: float | None = None
    current_score: float | None = None
    previous_score: float | None = None
    recent_change: float | None = None
    strength: float | None = None
    recommendation: Recommendation | None = None


@dataclass
class DashboardMetrics:
    total_readings: int
    avg_quality: float
    alerts: int
    uptime_hours: float
    data_quality: str  # "excellent" | "good" | "limited"


@dataclass
class TrendReport:
    time_range: str
    generated_at: str
    data_points: int
    parameters: dict[str, ParameterStats | None] = field(default_factory=dict)
    anomalies: list[AnomalyResult] = field(default_factory=list)
    predictions: dict[str, Prediction] = field(default_factory=dict)
    quality_trend: QualityTrend | None = None
    correlations: dict[str, CorrelationResult] | None = None


def recommend(direction: str, change_rate: float) -> Recommendation:
    if direction == "decreasing" and abs(change_rate) > RAPID_DECLINE_RATE:
        return Recommendation(
            priority="critical",
            action=(
                "Quality declining rapidly. Review recent changes in feeding, "
                "storage, or hygiene practices immediately."
            ),
        )
    if direction == "decreasing":
        return Recommendation(
            priority="high",
            action="Monitor closely. Identify and address factors causing quality decline.",
        )
    if direction == "increasing":
        return Recommendation(priority="low", action="Continue current practices. Quality is improving.")
    return Recommendation(priority="low", action="Maintain current standards.")


def classify_data_quality(total_readings: int) -> str:
    if total_readings > 50:
        return "excellent"
    if total_readings > 20:
        return "good"
    return "limited"


class TrendReportBuilder:
    """
    Reads one snapshot of the windowed history and runs every analysis over it,
    so all sections of a report describe the same set of readings.
    """

    def __init__(
        self,
        store: HistoryStore,
        statistics: StatisticsEngine,
        trend_detector: TrendDetector,
        anomaly_detector: AnomalyDetector,
        forecaster: Forecaster,
        correlation_analyzer: CorrelationAnalyzer,
        scorer: QualityScorer | None = None,
        parameters: Sequence[str] = TRACKED_PARAMETERS,
    ):
        self._store = store
        self._statistics = statistics
        self._trend = trend_detector
        self._anomaly = anomaly_detector
        self._forecaster = forecaster
        self._correlation = correlation_analyzer
        self._scorer = scorer
        self.parameters = tuple(parameters)

    def build_report(self, window: TimeWindow) -> TrendReport:
        readings = self._store.filter_by_window(window)

        report = TrendReport(
            time_range=window.value,
            generated_at=datetime.fromtimestamp(
                self._store.now_ms() / 1000, tz=timezone.utc
            ).isoformat(),
            data_points=len(readings),
            quality_trend=self._quality_trend_from(readings),
            correlations=self._correlation.correlate_all(self.parameters, readings),
        )

        for parameter in self.parameters:
            report.parameters[parameter] = self._statistics.compute_stats(parameter, readings)

            anomaly = self._anomaly.detect(parameter, readings)
            if anomaly.has_anomaly:
                report.anomalies.append(anomaly)

            prediction = self._forecaster.predict_next(parameter, readings)
            if prediction is not None:
                report.predictions[parameter] = prediction

        return report

    def quality_trend(self, window: TimeWindow) -> QualityTrend:
        return self._quality_trend_from(self._store.filter_by_window(window))

    def _quality_trend_from(self, readings) -> QualityTrend:
        scores = score_readings(self._scorer, readings)
        if len(scores) < MIN_QUALITY_SCORES:
            return QualityTrend(
                trend="insufficient_data",
                message=f"Need at least {MIN_QUALITY_SCORES} readings for trend analysis",
            )

        trend = self._trend.compute_trend(scores)
        current, previous = scores[-1], scores[-2]

        rate = abs(trend.change_rate)
        if trend.direction == "increasing":
            message = f"Quality improving! +{rate:.1f}% per reading"
        elif trend.direction == "decreasing":
            message = f"Quality declining. -{rate:.1f}% per reading. Take action!"
        else:
            message = "Quality stable. Maintain current practices."

        return QualityTrend(
            trend=trend.direction,
            message=message,
            change_rate=trend.change_rate,
            current_score=current,
            previous_score=previous,
            recent_change=current - previous,
            strength=trend.strength,
            recommendation=recommend(trend.direction, trend.change_rate),
        )

    def dashboard_metrics(self) -> DashboardMetrics:
        history = self._store.get_all()
        if not history:
            return DashboardMetrics(
                total_readings=0, avg_quality=0.0, alerts=0, uptime_hours=0.0, data_quality="limited",
            )

        scores = score_readings(self._scorer, history)
        avg_quality = sum(scores) / len(scores) if scores else 0.0
        alerts = sum(1 for score in scores if score < ALERT_SCORE_THRESHOLD)
        uptime_hours = (history[-1].timestamp_ms - history[0].timestamp_ms) / 3_600_000

        return DashboardMetrics(
            total_readings=len(history),
            avg_quality=round(avg_quality, 1),
            alerts=alerts,
            uptime_hours=round(uptime_hours, 1),
            data_quality=classify_data_quality(len(history)),
        )
