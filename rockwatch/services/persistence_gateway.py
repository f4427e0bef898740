# rockwatch/services/persistence_gateway.py
"""
Persistence gateway over a SQLAlchemy session.
Stores sensor readings, mine risk state, alert records and delivery attempts.
Each write commits on its own; on failure the session is rolled back and the
error propagates so callers can decide whether it is fatal.
"""

from dataclasses import dataclass
from datetime import datetime
from typing import Iterable, Optional

from sqlalchemy import text
from sqlalchemy.orm import Session

from rockwatch.models.alert import Alert
from rockwatch.models.delivery_log import DeliveryLog
from rockwatch.models.mine import Mine
from rockwatch.models.sensor_data import SensorData
from rockwatch.schemas.sensor_reading import SENSOR_FIELDS, SensorReading, SensorReadingRow
from rockwatch.services.notification_channels import DeliveryOutcome
from rockwatch.services.risk_scorer import RiskAssessment, RiskLevel
from rockwatch.utils.logger import get_logger

logger = get_logger(__name__)


@dataclass
class AlertRecord:
    mine_id: str
    alert_level: str
    risk_probability: float
    message: str


class SqlPersistenceGateway:
    def __init__(self, db: Session):
        self.db = db

    def _commit(self):
        try:
            self.db.commit()
        except Exception:
            self.db.rollback()
            raise

    def ping(self) -> bool:
        self.db.execute(text("SELECT 1"))
        return True

    def get_entity(self, mine_id: str) -> Optional[Mine]:
        return self.db.query(Mine).filter(Mine.id == mine_id).first()

    def append_sensor_reading(self, mine_id: str, reading: SensorReading,
                              timestamp: Optional[datetime] = None) -> SensorData:
        now = datetime.utcnow()
        row = SensorData(mine_id=mine_id, timestamp=timestamp or now, created_at=now,
                         **{name: getattr(reading, name) for name in SENSOR_FIELDS})
        self.db.add(row)
        self._commit()
        return row

    def bulk_append_sensor_readings(self, rows: Iterable[SensorReadingRow]) -> int:
        """Insert all rows in one transaction. Either every row lands or none does."""
        now = datetime.utcnow()
        objects = [
            SensorData(mine_id=r.mine_id, timestamp=r.timestamp or now, created_at=now,
                       **{name: getattr(r, name) for name in SENSOR_FIELDS})
            for r in rows
        ]
        self.db.add_all(objects)
        self._commit()
        return len(objects)

    def update_entity_risk(self, mine_id: str, assessment: RiskAssessment,
                           alert_level: Optional[RiskLevel] = None) -> Optional[Mine]:
        mine = self.get_entity(mine_id)
        if not mine:
            logger.warning(f"[DB] Cannot update risk, mine {mine_id} not found")
            return None
        mine.current_risk_probability = assessment.probability
        mine.current_risk_level = assessment.level.value
        if alert_level is not None:
            mine.alert_level = alert_level.value
        mine.last_updated = datetime.utcnow()
        self._commit()
        return mine

    def append_alert_record(self, record: AlertRecord) -> Alert:
        alert = Alert(mine_id=record.mine_id, alert_level=record.alert_level,
                      risk_probability=record.risk_probability, message=record.message,
                      is_resolved=False, created_at=datetime.utcnow())
        self.db.add(alert)
        self._commit()
        logger.warning(f"[ALERT][{record.alert_level.upper()}] {record.message}")
        return alert

    def resolve_open_alerts(self, mine_id: str) -> int:
        open_alerts = self.db.query(Alert).filter(Alert.mine_id == mine_id, Alert.is_resolved.is_(False)).all()
        now = datetime.utcnow()
        for alert in open_alerts:
            alert.is_resolved = True
            alert.resolved_at = now
        self._commit()
        return len(open_alerts)

    def append_delivery_outcome(self, outcome: DeliveryOutcome) -> DeliveryLog:
        row = DeliveryLog(mine_id=outcome.mine_id, channel=outcome.channel, provider=outcome.provider,
                          recipient=outcome.recipient, success=outcome.success, error=outcome.error,
                          created_at=outcome.created_at)
        self.db.add(row)
        self._commit()
        return row
