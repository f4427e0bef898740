# rockwatch/routers/sensor_data.py
"""
POST /import-sensor-data — bulk append of sensor rows (CSV upload from the dashboard).
GET  /sensor-data        — raw reading log with optional mine filter.
"""

from typing import Optional

from fastapi import APIRouter, Depends, Request
from fastapi.responses import JSONResponse
from pydantic import TypeAdapter, ValidationError
from sqlalchemy.orm import Session

from rockwatch.database import get_db
from rockwatch.dependencies import get_gateway
from rockwatch.models.sensor_data import SensorData
from rockwatch.schemas.sensor_reading import SensorReadingRow
from rockwatch.services.persistence_gateway import SqlPersistenceGateway
from rockwatch.utils.logger import get_logger
from rockwatch.utils.validation import describe_validation_error

router = APIRouter()
logger = get_logger(__name__)

_rows_adapter = TypeAdapter(list[SensorReadingRow])


@router.post("/import-sensor-data", summary="Bulk import sensor readings")
async def import_sensor_data(request: Request, gateway: SqlPersistenceGateway = Depends(get_gateway)):
    """Accepts a JSON array of rows, or the dashboard's {"csvData": [...]} wrapper."""
    try:
        body = await request.json()
    except ValueError:
        return JSONResponse(status_code=400, content={"success": False, "error": "Request body must be valid JSON"})

    if isinstance(body, dict) and "csvData" in body:
        body = body["csvData"]
    if not isinstance(body, list):
        return JSONResponse(status_code=400, content={"success": False, "error": "Expected an array of sensor rows"})

    try:
        rows = _rows_adapter.validate_python(body)
    except ValidationError as e:
        return JSONResponse(status_code=400, content={
            "success": False,
            "error": f"Invalid sensor rows: {describe_validation_error(e)}",
        })

    logger.info(f"Importing {len(rows)} sensor data rows")
    try:
        count = gateway.bulk_append_sensor_readings(rows)
    except Exception as e:
        logger.error(f"Error inserting sensor data: {e}", exc_info=True)
        return JSONResponse(status_code=500, content={
            "success": False,
            "error": "Failed to import sensor data",
            "details": str(e),
        })

    logger.info(f"Successfully imported {count} sensor data rows")
    return {"success": True, "message": f"Imported {count} sensor data rows", "imported_count": count}


@router.get("/sensor-data", summary="List stored sensor readings")
def list_sensor_data(mine_id: Optional[str] = None, limit: int = 100, db: Session = Depends(get_db)):
    q = db.query(SensorData)
    if mine_id:
        q = q.filter(SensorData.mine_id == mine_id)
    rows = q.order_by(SensorData.timestamp.desc()).limit(limit).all()
    return [
        {
            "id": r.id, "mine_id": r.mine_id, "timestamp": r.timestamp,
            "displacement": r.displacement, "strain": r.strain, "pore_pressure": r.pore_pressure,
            "rainfall": r.rainfall, "temperature": r.temperature, "dem_slope": r.dem_slope,
            "crack_score": r.crack_score,
        }
        for r in rows
    ]
