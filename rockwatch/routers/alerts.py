# rockwatch/routers/alerts.py
"""
Alert endpoints.
POST /send-alert              — manual SMS + email fan-out for one mine.
GET  /alerts                  — alert audit trail, newest first.
PUT  /alerts/{alert_id}/resolve — mark an alert resolved.
"""

from datetime import datetime
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Request
from fastapi.responses import JSONResponse
from pydantic import ValidationError
from sqlalchemy.orm import Session

from rockwatch.config import Settings, get_settings
from rockwatch.database import get_db
from rockwatch.dependencies import get_dispatcher, get_gateway
from rockwatch.models.alert import Alert
from rockwatch.schemas.alert import AlertOut, SendAlertRequest
from rockwatch.services.notification_dispatcher import NotificationDispatcher
from rockwatch.services.notification_message import build_alert_message
from rockwatch.services.persistence_gateway import AlertRecord, SqlPersistenceGateway
from rockwatch.services.risk_scorer import email_priority
from rockwatch.utils.logger import get_logger
from rockwatch.utils.validation import describe_validation_error

router = APIRouter()
logger = get_logger(__name__)


@router.post("/send-alert", summary="Send SMS + email alert for a mine")
async def send_alert(request: Request,
                     dispatcher: NotificationDispatcher = Depends(get_dispatcher),
                     gateway: SqlPersistenceGateway = Depends(get_gateway),
                     settings: Settings = Depends(get_settings)):
    """
    Provider failures never fail the request. They are written to the
    delivery log and reported in the response body with HTTP 200.
    """
    try:
        body = await request.json()
    except ValueError:
        return JSONResponse(status_code=400, content={"success": False, "error": "Request body must be valid JSON"})
    try:
        payload = SendAlertRequest.model_validate(body)
    except ValidationError as e:
        return JSONResponse(status_code=400, content={
            "success": False,
            "error": f"Missing or invalid fields: {describe_validation_error(e)}",
        })

    level = email_priority(payload.risk_probability)
    message = build_alert_message(
        payload.mine_id, payload.mine_name, payload.location, payload.risk_probability, level,
        email_to=payload.user_email or settings.ALERT_EMAIL_TO,
    )
    logger.info(f"[SEND-ALERT] {payload.mine_name} {message.risk_percent}% ({level.value})")

    try:
        gateway.append_alert_record(AlertRecord(
            mine_id=payload.mine_id,
            alert_level=level.value,
            risk_probability=payload.risk_probability,
            message=f"Risk alert sent for {payload.mine_name} - Risk: {message.risk_percent}%",
        ))
    except Exception as e:
        logger.error(f"[SEND-ALERT] Failed to record alert: {e}")

    outcome = await dispatcher.dispatch(message)
    return {
        "success": True,
        "message": "Alert notifications sent",
        "provider": outcome.provider if outcome.success else None,
        "delivered": outcome.success,
        "error": outcome.error,
    }


@router.get("/alerts", response_model=list[AlertOut], summary="Alert history, filterable by mine")
def get_alerts(
    mine_id: Optional[str] = None,
    is_resolved: Optional[bool] = None,
    limit: int = 50,
    db: Session = Depends(get_db),
):
    q = db.query(Alert)
    if mine_id:
        q = q.filter(Alert.mine_id == mine_id)
    if is_resolved is not None:
        q = q.filter(Alert.is_resolved == is_resolved)
    return q.order_by(Alert.created_at.desc()).limit(limit).all()


@router.put("/alerts/{alert_id}/resolve", summary="Resolve an alert")
def resolve_alert(alert_id: int, db: Session = Depends(get_db)):
    alert = db.query(Alert).filter(Alert.id == alert_id).first()
    if not alert:
        raise HTTPException(status_code=404, detail="Alert not found")
    alert.is_resolved = True
    alert.resolved_at = datetime.utcnow()
    db.commit()
    return {"id": alert_id, "status": "resolved"}
