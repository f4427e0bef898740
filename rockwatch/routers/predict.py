# rockwatch/routers/predict.py
"""
POST /predict — score a sensor reading and, when a mine is named, run the full
alert cycle (persist reading, update mine risk, edge-triggered notification).
Always answers 200 with a well-formed payload, falling back to a neutral
medium-risk result on any error. The one exception is an unknown mine_id,
which is a 404 raised before any scoring happens.
"""

from fastapi import APIRouter, Depends, Request
from fastapi.responses import JSONResponse

from rockwatch.config import Settings, get_settings
from rockwatch.dependencies import get_pipeline
from rockwatch.exceptions import MineNotFoundError
from rockwatch.schemas.sensor_reading import PredictRequest
from rockwatch.services.risk_pipeline import PipelineResult, RiskPipeline
from rockwatch.utils.logger import get_logger

router = APIRouter()
logger = get_logger(__name__)

MODEL_INFO = {
    "model_type": "Weighted Nonlinear Risk Model",
    "version": "1.0.0",
    "features_used": 7,
    "prediction_method": "weighted_nonlinear",
}

FALLBACK_PAYLOAD = {
    "success": False,
    "risk_probability": 0.5,
    "risk_level": "medium",
    "confidence": 0.5,
    "recommendation": "Unable to process prediction. Please try again.",
    "parameter_alerts": [],
    "alert_triggered": False,
    "model_info": {"model_type": "Error Fallback", "version": "1.0.0"},
}


def _to_response(result: PipelineResult) -> dict:
    assessment = result.assessment
    return {
        "success": True,
        "risk_probability": assessment.probability,
        "risk_level": assessment.level.value,
        "confidence": assessment.confidence,
        "recommendation": assessment.recommendation,
        "parameter_alerts": [a.to_dict() for a in result.parameter_alerts],
        "alert_triggered": result.alert_triggered,
        "alert_state": result.transition.current.value if result.transition else None,
        "delivery": {
            "provider": result.delivery.provider,
            "success": result.delivery.success,
        } if result.delivery else None,
        "model_info": MODEL_INFO,
    }


@router.post("/predict", summary="Score a sensor reading")
async def predict(request: Request,
                  pipeline: RiskPipeline = Depends(get_pipeline),
                  settings: Settings = Depends(get_settings)):
    try:
        payload = PredictRequest.model_validate(await request.json())
        logger.info(f"Prediction request: mine={payload.mine_id} displacement={payload.displacement} "
                    f"strain={payload.strain} crack_score={payload.crack_score}")

        if payload.mine_id:
            result = await pipeline.evaluate_reading(payload.mine_id, payload, email_to=settings.ALERT_EMAIL_TO)
        else:
            result = pipeline.assess(payload)
        return _to_response(result)

    except MineNotFoundError as e:
        logger.warning(f"Prediction for unknown mine: {e.mine_id}")
        return JSONResponse(status_code=404, content={"success": False, "error": str(e)})
    except Exception as e:
        logger.error(f"Prediction error: {e}", exc_info=True)
        return {**FALLBACK_PAYLOAD, "error": str(e)}  # Still return 200
