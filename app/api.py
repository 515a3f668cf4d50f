"""
API Endpoints for Loan Approval and Stock Forecasts.

Defines FastAPI routes for scoring, evaluation, synthetic data, forecasts,
health checks and model info.
"""

import asyncio
import logging
import time
import uuid
from datetime import datetime
from typing import List, Optional

import numpy as np
from fastapi import APIRouter, Depends, HTTPException, Query, status

from app.config import Settings, get_settings
from app.monitoring import (
    record_batch_size,
    record_evaluation,
    record_forecast,
    record_prediction,
)
from app.schemas import (
    BatchPredictionRequest,
    BatchPredictionResponse,
    ConfusionMatrixResponse,
    ErrorResponse,
    EvaluationResponse,
    FactorResponse,
    FeatureVectorResponse,
    ForecastPointResponse,
    ForecastResponse,
    ForecastSummaryResponse,
    HealthResponse,
    LoanApplicationRecord,
    LoanApplicationRequest,
    ModelComparisonResponse,
    ModelInfoResponse,
    ModelOutputResponse,
    PredictionResponse,
    PricePointResponse,
    ScoreResponse,
    StockSymbolResponse,
    SyntheticApplicationsResponse,
)
from ml.config import (
    DECISION_THRESHOLD,
    DEFAULT_FORECAST_DAYS,
    DEFAULT_HISTORY_DAYS,
    FEATURE_NAMES,
    LINEAR_BIAS,
    LINEAR_ENSEMBLE_WEIGHT,
    LINEAR_WEIGHTS,
    STOCK_SYMBOLS,
    VOTE_ENSEMBLE_WEIGHT,
)
from ml.data_generator import generate_synthetic
from ml.ensemble import combine
from ml.entities import EnsembleResult, EvaluationReport, ModelKind, ModelOutput
from ml.evaluation import compare_models, evaluate_model
from ml.forecast import base_price, forecast, historical, summarize_forecast
from ml.preprocessing import encode
from ml.scoring import score_linear, score_vote

# Configure logging
logger = logging.getLogger(__name__)

# Create router
router = APIRouter()

BAD_REQUEST_RESPONSE = {400: {"model": ErrorResponse, "description": "Invalid input"}}


def _model_output_response(output: ModelOutput) -> ModelOutputResponse:
    return ModelOutputResponse(
        decision=output.decision,
        confidence=round(output.confidence, 4),
        approval_probability=round(output.approval_probability, 4),
    )


def _prediction_response(application_id: str, result: EnsembleResult) -> PredictionResponse:
    return PredictionResponse(
        application_id=application_id,
        decision=result.decision,
        confidence=round(result.confidence, 4),
        approval_probability=round(result.approval_probability, 4),
        risk_score=round(result.risk_score, 2),
        risk_level=result.risk_level,
        linear=_model_output_response(result.linear),
        vote=_model_output_response(result.vote),
        factors=[
            FactorResponse(
                factor=factor.factor,
                impact=round(factor.impact, 2),
                description=factor.description,
            )
            for factor in result.factors
        ],
        timestamp=datetime.utcnow(),
    )


def _evaluation_response(report: EvaluationReport) -> EvaluationResponse:
    return EvaluationResponse(
        model_kind=report.model_kind,
        sample_size=report.sample_size,
        accuracy=round(report.accuracy, 4),
        precision=round(report.precision, 4),
        recall=round(report.recall, 4),
        f1_score=round(report.f1_score, 4),
        auc=round(report.auc, 4),
        confusion_matrix=ConfusionMatrixResponse.model_validate(report.confusion_matrix),
    )


def _score_application(
    application: LoanApplicationRequest,
    settings: Settings,
) -> PredictionResponse:
    application_id = uuid.uuid4().hex

    start_time = time.time()
    result = combine(
        application.to_entity(application_id),
        n_estimators=settings.vote_estimators,
        random_state=settings.vote_random_state,
    )
    duration = time.time() - start_time

    record_prediction(decision=result.decision.value, model="ensemble", duration=duration)

    return _prediction_response(application_id, result)


def _resolve_sample_size(sample_size: Optional[int], settings: Settings) -> int:
    if sample_size is None:
        return settings.evaluation_sample_size

    if sample_size > settings.max_evaluation_sample_size:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=f"sample_size must not exceed {settings.max_evaluation_sample_size}",
        )

    return sample_size


@router.get(
    "/health",
    response_model=HealthResponse,
    tags=["Health"],
    summary="Health check",
    description="Check if the API service is running",
)
async def health_check(settings: Settings = Depends(get_settings)) -> HealthResponse:
    """
    Basic health check endpoint.

    Returns service status and version.
    """
    return HealthResponse(
        status="healthy",
        version=settings.app_version,
        timestamp=datetime.utcnow(),
    )


@router.get(
    "/model/info",
    response_model=ModelInfoResponse,
    tags=["Model"],
    summary="Get model information",
    description="Get the fixed parameters of the scoring models",
)
async def get_model_info(settings: Settings = Depends(get_settings)) -> ModelInfoResponse:
    return ModelInfoResponse(
        features=FEATURE_NAMES,
        linear_weights=LINEAR_WEIGHTS,
        linear_bias=LINEAR_BIAS,
        vote_estimators=settings.vote_estimators,
        vote_seeded=settings.vote_random_state is not None,
        ensemble_weights={
            ModelKind.LINEAR.value: LINEAR_ENSEMBLE_WEIGHT,
            ModelKind.VOTE.value: VOTE_ENSEMBLE_WEIGHT,
        },
        decision_threshold=DECISION_THRESHOLD,
    )


@router.post(
    "/features",
    response_model=FeatureVectorResponse,
    tags=["Model"],
    summary="Encode an application",
    description="Return the normalized feature vector the models score",
)
async def encode_features(application: LoanApplicationRequest) -> FeatureVectorResponse:
    record = application.to_entity()
    features = encode(record)

    return FeatureVectorResponse(
        application_id=record.id,
        features={name: float(value) for name, value in zip(FEATURE_NAMES, features)},
    )


@router.post(
    "/score/{model_kind}",
    response_model=ScoreResponse,
    tags=["Prediction"],
    summary="Score with a single model",
    description="Score an application with the linear or the vote model only",
)
async def score(
    model_kind: ModelKind,
    application: LoanApplicationRequest,
    settings: Settings = Depends(get_settings),
) -> ScoreResponse:
    record = application.to_entity()

    start_time = time.time()
    if model_kind is ModelKind.LINEAR:
        output = score_linear(record)
    else:
        output = score_vote(
            record,
            n_estimators=settings.vote_estimators,
            random_state=settings.vote_random_state,
        )
    duration = time.time() - start_time

    record_prediction(decision=output.decision.value, model=model_kind.value, duration=duration)

    return ScoreResponse(
        model_kind=model_kind,
        **_model_output_response(output).model_dump(),
    )


@router.post(
    "/predict",
    response_model=PredictionResponse,
    tags=["Prediction"],
    summary="Make a loan decision",
    description="Score an application with both models and combine the results",
    responses={
        200: {"description": "Successful prediction"},
        **BAD_REQUEST_RESPONSE,
    },
)
async def predict(
    application: LoanApplicationRequest,
    settings: Settings = Depends(get_settings),
) -> PredictionResponse:
    """
    Make an ensemble loan decision for a single application.

    Args:
        application: Loan application data

    Returns:
        Decision with risk score and explanatory factors
    """
    return _score_application(application, settings)


@router.post(
    "/predict/batch",
    response_model=BatchPredictionResponse,
    tags=["Prediction"],
    summary="Make batch loan decisions",
    description="Submit multiple loan applications and receive decisions",
    responses={
        200: {"description": "Successful batch prediction"},
        **BAD_REQUEST_RESPONSE,
    },
)
async def predict_batch(
    request: BatchPredictionRequest,
    settings: Settings = Depends(get_settings),
) -> BatchPredictionResponse:
    """
    Make ensemble decisions for multiple applications.

    Args:
        request: Batch of loan applications

    Returns:
        List of prediction results
    """
    if len(request.applications) > settings.max_batch_size:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=f"Batch size must not exceed {settings.max_batch_size}",
        )

    start_time = time.time()

    record_batch_size(len(request.applications))
    predictions = [_score_application(application, settings) for application in request.applications]

    duration = time.time() - start_time

    return BatchPredictionResponse(
        predictions=predictions,
        total_processed=len(predictions),
        processing_time_ms=duration * 1000,
    )


@router.get(
    "/synthetic",
    response_model=SyntheticApplicationsResponse,
    tags=["Data"],
    summary="Generate synthetic applications",
    description="Generate randomized loan applications",
)
async def synthetic_applications(
    count: int = Query(10, ge=0, description="Number of applications"),
    seed: Optional[int] = Query(None, description="Random seed for reproducibility"),
    settings: Settings = Depends(get_settings),
) -> SyntheticApplicationsResponse:
    if count > settings.max_synthetic_count:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=f"count must not exceed {settings.max_synthetic_count}",
        )

    records = generate_synthetic(count, random_state=seed)

    return SyntheticApplicationsResponse(
        applications=[LoanApplicationRecord.model_validate(record) for record in records],
        count=len(records),
    )


@router.get(
    "/evaluate",
    response_model=ModelComparisonResponse,
    tags=["Evaluation"],
    summary="Evaluate all models",
    description="Run every scoring model against synthetic ground truth",
)
async def evaluate_all(
    sample_size: Optional[int] = Query(None, ge=0, description="Synthetic samples per model"),
    seed: Optional[int] = Query(None, description="Random seed for reproducibility"),
    settings: Settings = Depends(get_settings),
) -> ModelComparisonResponse:
    sample_size = _resolve_sample_size(sample_size, settings)

    start_time = time.time()
    reports = compare_models(
        sample_size=sample_size,
        random_state=seed,
        n_estimators=settings.vote_estimators,
    )
    duration = time.time() - start_time

    for kind, report in reports.items():
        record_evaluation(kind.value, duration / len(reports), report.accuracy)

    return ModelComparisonResponse(
        reports=[_evaluation_response(report) for report in reports.values()],
        processing_time_ms=duration * 1000,
    )


@router.get(
    "/evaluate/{model_kind}",
    response_model=EvaluationResponse,
    tags=["Evaluation"],
    summary="Evaluate a model",
    description="Run one scoring model against synthetic ground truth",
    responses={
        200: {"description": "Evaluation report"},
        **BAD_REQUEST_RESPONSE,
    },
)
async def evaluate(
    model_kind: ModelKind,
    sample_size: Optional[int] = Query(None, ge=0, description="Number of synthetic samples"),
    seed: Optional[int] = Query(None, description="Random seed for reproducibility"),
    settings: Settings = Depends(get_settings),
) -> EvaluationResponse:
    sample_size = _resolve_sample_size(sample_size, settings)

    start_time = time.time()
    report = evaluate_model(
        model_kind,
        sample_size=sample_size,
        random_state=seed,
        n_estimators=settings.vote_estimators,
    )
    duration = time.time() - start_time

    record_evaluation(model_kind.value, duration, report.accuracy)

    return _evaluation_response(report)


@router.get(
    "/stocks",
    response_model=List[StockSymbolResponse],
    tags=["Forecast"],
    summary="List stock symbols",
    description="List the tickers with a known base price",
)
async def list_stocks() -> List[StockSymbolResponse]:
    return [StockSymbolResponse.model_validate(stock) for stock in STOCK_SYMBOLS]


@router.get(
    "/stocks/{symbol}/forecast",
    response_model=ForecastResponse,
    tags=["Forecast"],
    summary="Forecast a stock price",
    description="Generate a historical series and a forward price prediction",
    responses={
        200: {"description": "Forecast generated"},
        **BAD_REQUEST_RESPONSE,
    },
)
async def stock_forecast(
    symbol: str,
    history_days: int = Query(DEFAULT_HISTORY_DAYS, ge=1, le=3650, description="Days of history"),
    forecast_days: int = Query(DEFAULT_FORECAST_DAYS, ge=1, le=365, description="Forecast horizon"),
    seed: Optional[int] = Query(None, description="Random seed for reproducibility"),
    settings: Settings = Depends(get_settings),
) -> ForecastResponse:
    """
    Generate a forecast for one ticker.

    Unknown tickers are forecast from a base price of 100.
    """
    symbol = symbol.upper()

    if settings.forecast_delay_seconds > 0:
        await asyncio.sleep(settings.forecast_delay_seconds)

    try:
        rng = np.random.default_rng(seed)
        history = historical(symbol, days=history_days, random_state=rng)
        predictions = forecast(history, days=forecast_days, random_state=rng)
    except ValueError as e:
        logger.error(f"Forecast error for {symbol}: {e}")
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=str(e),
        )

    current_price = base_price(symbol)
    summary = summarize_forecast(predictions, current_price)

    record_forecast(symbol)
    logger.info(f"Forecast {symbol}: {history_days} days history, {forecast_days} days ahead")

    return ForecastResponse(
        symbol=symbol,
        current_price=current_price,
        historical=[PricePointResponse.model_validate(point) for point in history],
        predictions=[ForecastPointResponse.model_validate(point) for point in predictions],
        summary=ForecastSummaryResponse.model_validate(summary),
        timestamp=datetime.utcnow(),
    )
