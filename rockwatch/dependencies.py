# rockwatch/dependencies.py
"""
FastAPI dependency providers.
Every component is built from an explicit Settings instance and the
request's DB session, so tests swap any of them via app.dependency_overrides.
"""

import random
from functools import lru_cache
from typing import Optional

from fastapi import Depends
from sqlalchemy.orm import Session

from rockwatch.config import Settings, get_settings
from rockwatch.database import get_db
from rockwatch.services.notification_dispatcher import NotificationDispatcher, build_dispatcher
from rockwatch.services.persistence_gateway import SqlPersistenceGateway
from rockwatch.services.risk_pipeline import RiskPipeline
from rockwatch.services.risk_scorer import RiskScorer
from rockwatch.services.threshold_evaluator import ThresholdEvaluator
from rockwatch.services.weather_service import WeatherService


def get_gateway(db: Session = Depends(get_db)) -> SqlPersistenceGateway:
    return SqlPersistenceGateway(db)


@lru_cache
def get_risk_rng(seed: Optional[int] = None) -> random.Random:
    """One perturbation source per seed for the whole process.
    Successive requests continue the same sequence of draws."""
    return random.Random(seed)


def get_scorer(settings: Settings = Depends(get_settings)) -> RiskScorer:
    return RiskScorer.from_settings(settings, rng=get_risk_rng(settings.RISK_RANDOM_SEED))


def get_evaluator(settings: Settings = Depends(get_settings)) -> ThresholdEvaluator:
    return ThresholdEvaluator(settings.PARAMETER_THRESHOLDS)


def get_dispatcher(settings: Settings = Depends(get_settings),
                   gateway: SqlPersistenceGateway = Depends(get_gateway)) -> NotificationDispatcher:
    return build_dispatcher(settings, gateway)


def get_pipeline(gateway: SqlPersistenceGateway = Depends(get_gateway),
                 scorer: RiskScorer = Depends(get_scorer),
                 evaluator: ThresholdEvaluator = Depends(get_evaluator),
                 dispatcher: NotificationDispatcher = Depends(get_dispatcher)) -> RiskPipeline:
    return RiskPipeline(gateway, scorer, evaluator, dispatcher)


def get_weather_service(settings: Settings = Depends(get_settings)) -> WeatherService:
    return WeatherService(settings.WEATHER_API_KEY, settings.WEATHER_API_URL,
                          timeout=settings.PROVIDER_TIMEOUT_SECONDS)
