"""REST API endpoints for statistics, anomalies, forecasts, correlations, and reports."""

from dataclasses import asdict

from fastapi import APIRouter, Depends, Query

from analytics.engine import TrendEngine
from api.dependencies import get_engine
from ingest.schemas import SensorParameter, TimeWindow

router = APIRouter(prefix="/api/v1")


@router.get("/parameters/{parameter}/stats")
async def get_parameter_stats(
    parameter: SensorParameter,
    window: TimeWindow = Query(default=TimeWindow.ALL),
    engine: TrendEngine = Depends(get_engine),
):
    """Descriptive statistics, trend, and stability for one parameter. Null with no data."""
    stats = engine.get_parameter_stats(parameter.value, window)
    return asdict(stats) if stats else None


@router.get("/parameters/{parameter}/anomaly")
async def detect_anomaly(
    parameter: SensorParameter,
    threshold: float | None = Query(default=None, gt=0, description="Z-score threshold"),
    window: TimeWindow = Query(default=TimeWindow.ALL),
    engine: TrendEngine = Depends(get_engine),
):
    """Whether the latest value deviates from the parameter's history."""
    return asdict(engine.detect_anomalies(parameter.value, threshold, window))


@router.get("/parameters/{parameter}/prediction")
async def predict_next_value(
    parameter: SensorParameter,
    alpha: float | None = Query(default=None, gt=0, le=1, description="Smoothing factor"),
    window: TimeWindow = Query(default=TimeWindow.ALL),
    engine: TrendEngine = Depends(get_engine),
):
    """One-step-ahead forecast. Null with fewer than 5 values."""
    prediction = engine.predict_next_value(parameter.value, alpha, window)
    return asdict(prediction) if prediction else None


@router.get("/quality/trend")
async def get_quality_trend(
    window: TimeWindow = Query(default=TimeWindow.HOURS_24),
    engine: TrendEngine = Depends(get_engine),
):
    return asdict(engine.get_quality_trend(window))


@router.get("/correlations")
async def get_correlations(
    window: TimeWindow = Query(default=TimeWindow.ALL),
    engine: TrendEngine = Depends(get_engine),
):
    """Pairwise correlations keyed "<a>_<b>". Null with fewer than 20 readings."""
    correlations = engine.get_parameter_correlations(window)
    if correlations is None:
        return None
    return {key: asdict(result) for key, result in correlations.items()}


@router.get("/report")
async def generate_trend_report(
    window: TimeWindow = Query(default=TimeWindow.HOURS_24),
    engine: TrendEngine = Depends(get_engine),
):
    return asdict(engine.generate_trend_report(window))


@router.get("/dashboard")
async def get_dashboard_metrics(engine: TrendEngine = Depends(get_engine)):
    return asdict(engine.get_dashboard_metrics())
