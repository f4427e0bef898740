"""Shared fixtures: in-memory SQLite store, seeded mine, deterministic scorer."""

import os
import sys
sys.path.insert(0, os.path.join(os.path.dirname(__file__), ".."))

# Must be set before rockwatch.config is first imported
os.environ["DATABASE_URL"] = "sqlite://"
os.environ.setdefault("LOG_LEVEL", "WARNING")

from datetime import datetime

import pytest
from sqlalchemy.orm import sessionmaker

from rockwatch.database import build_engine, create_tables
from rockwatch.models.mine import Mine
from rockwatch.services.persistence_gateway import SqlPersistenceGateway
from rockwatch.services.risk_scorer import RiskScorer


class MidpointRandom:
    """rng stand-in with a fixed draw. The default 0.5 means zero perturbation."""

    def __init__(self, value=0.5):
        self.value = value

    def random(self):
        return self.value


@pytest.fixture
def engine():
    eng = build_engine("sqlite://")
    create_tables(bind=eng)
    yield eng
    eng.dispose()


@pytest.fixture
def db(engine):
    session = sessionmaker(autocommit=False, autoflush=False, bind=engine)()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def gateway(db):
    return SqlPersistenceGateway(db)


@pytest.fixture
def mine(db):
    m = Mine(id="mine-jharia", name="Jharia Coalfield", location="Dhanbad, Jharkhand",
             latitude=23.7441, longitude=86.4105, state="Jharkhand", mine_type="Coal",
             current_risk_level="low", current_risk_probability=0.1, alert_level="low",
             last_updated=datetime.utcnow(), created_at=datetime.utcnow())
    db.add(m)
    db.commit()
    return m


@pytest.fixture
def scorer():
    return RiskScorer(rng=MidpointRandom())
