"""Trend engine: wires history storage, analytics components, and the quality scorer."""

from dataclasses import asdict
from typing import Callable, Mapping, Sequence

from analytics.anomaly import AnomalyDetector, AnomalyResult
from analytics.correlation import CorrelationAnalyzer, CorrelationResult
from analytics.forecast import Forecaster, Prediction
from analytics.quality import QualityScorer, load_scorer
from analytics.report import DashboardMetrics, QualityTrend, TrendReport, TrendReportBuilder
from analytics.statistics import ParameterStats, StatisticsEngine
from analytics.trend import TrendDetector
from config import Settings, configure_logging
from ingest.schemas import TRACKED_PARAMETERS, ReadingIn, StoredReading, TimeWindow
from storage.backends import HistoryBackend, build_backend
from storage.history import HistoryStore, system_clock_ms


class TrendEngine:
    """
    Query surface for the milk-quality trend analytics.

    Every query re-reads the history and recomputes from scratch; nothing
    derived is cached between calls.
    """

    def __init__(
        self,
        store: HistoryStore,
        scorer: QualityScorer | None = None,
        trend_window: int = 20,
        anomaly_threshold: float = 2.5,
        smoothing_alpha: float = 0.3,
        parameters: Sequence[str] = TRACKED_PARAMETERS,
        log_level: str = "INFO",
    ):
        self.log = configure_logging("trend-engine", log_level)
        self.store = store
        self.parameters = tuple(parameters)

        self._trend = TrendDetector(window_size=trend_window)
        self._statistics = StatisticsEngine(self._trend)
        self._anomaly = AnomalyDetector(z_threshold=anomaly_threshold)
        self._forecaster = Forecaster(alpha=smoothing_alpha)
        self._correlation = CorrelationAnalyzer()
        self._reports = TrendReportBuilder(
            store,
            statistics=self._statistics,
            trend_detector=self._trend,
            anomaly_detector=self._anomaly,
            forecaster=self._forecaster,
            correlation_analyzer=self._correlation,
            scorer=scorer,
            parameters=self.parameters,
        )

    @classmethod
    def from_settings(
        cls,
        settings: Settings,
        backend: HistoryBackend | None = None,
        clock: Callable[[], float] = system_clock_ms,
        scorer: QualityScorer | None = None,
    ) -> "TrendEngine":
        store = HistoryStore(
            backend if backend is not None else build_backend(settings),
            max_points=settings.history_max_points,
            clock=clock,
            log_level=settings.log_level,
        )
        return cls(
            store,
            scorer=scorer if scorer is not None else load_scorer(settings.quality_scorer),
            trend_window=settings.trend_window,
            anomaly_threshold=settings.anomaly_threshold,
            smoothing_alpha=settings.smoothing_alpha,
            log_level=settings.log_level,
        )

    # ─── History ────────────────────────────────────────────────────

    def store_reading(self, reading: ReadingIn | Mapping) -> StoredReading:
        stored = self.store.append(reading)
        self.log.info(
            "reading_stored",
            timestamp_ms=stored.timestamp_ms,
            missing=[p for p in self.parameters if stored.value_of(p) is None],
        )
        return stored

    def get_history(self) -> list[StoredReading]:
        return self.store.get_all()

    def clear_history(self):
        self.store.clear()

    # ─── Per-parameter analytics ────────────────────────────────────

    def get_parameter_stats(
        self, parameter: str, window: TimeWindow | str = TimeWindow.ALL
    ) -> ParameterStats | None:
        self._check_parameter(parameter)
        readings = self.store.filter_by_window(self._resolve_window(window))
        return self._statistics.compute_stats(parameter, readings)

    def detect_anomalies(
        self,
        parameter: str,
        threshold: float | None = None,
        window: TimeWindow | str = TimeWindow.ALL,
    ) -> AnomalyResult:
        self._check_parameter(parameter)
        readings = self.store.filter_by_window(self._resolve_window(window))
        result = self._anomaly.detect(parameter, readings, threshold=threshold)
        if result.has_anomaly:
            self.log.warning("anomaly_detected", **asdict(result))
        return result

    def predict_next_value(
        self,
        parameter: str,
        alpha: float | None = None,
        window: TimeWindow | str = TimeWindow.ALL,
    ) -> Prediction | None:
        self._check_parameter(parameter)
        readings = self.store.filter_by_window(self._resolve_window(window))
        return self._forecaster.predict_next(parameter, readings, alpha=alpha)

    # ─── Composite analytics ────────────────────────────────────────

    def get_quality_trend(self, window: TimeWindow | str = TimeWindow.HOURS_24) -> QualityTrend:
        return self._reports.quality_trend(self._resolve_window(window))

    def get_parameter_correlations(
        self, window: TimeWindow | str = TimeWindow.ALL
    ) -> dict[str, CorrelationResult] | None:
        readings = self.store.filter_by_window(self._resolve_window(window))
        return self._correlation.correlate_all(self.parameters, readings)

    def generate_trend_report(self, window: TimeWindow | str = TimeWindow.HOURS_24) -> TrendReport:
        report = self._reports.build_report(self._resolve_window(window))
        for anomaly in report.anomalies:
            self.log.warning("anomaly_detected", **asdict(anomaly))
        self.log.info(
            "trend_report_generated",
            time_range=report.time_range,
            data_points=report.data_points,
            anomalies=len(report.anomalies),
            predictions=len(report.predictions),
        )
        return report

    def get_dashboard_metrics(self) -> DashboardMetrics:
        return self._reports.dashboard_metrics()

    # ─── Helpers ────────────────────────────────────────────────────

    def _check_parameter(self, parameter: str):
        if parameter not in self.parameters:
            raise ValueError(
                f"Unknown parameter {parameter!r}; expected one of {', '.join(self.parameters)}"
            )

    def _resolve_window(self, window: TimeWindow | str) -> TimeWindow:
        resolved = TimeWindow.parse(window)
        if resolved is None:
            self.log.warning("unknown_time_window", window=str(window), fallback=TimeWindow.ALL.value)
            return TimeWindow.ALL
        return resolved
