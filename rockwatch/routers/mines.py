# rockwatch/routers/mines.py
"""Monitored mines — current risk state as written by the alert pipeline."""

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session

from rockwatch.database import get_db
from rockwatch.models.mine import Mine
from rockwatch.schemas.mine import MineOut

router = APIRouter()


@router.get("/mines", response_model=list[MineOut], summary="All mines with latest risk")
def get_mines(risk_level: str = None, db: Session = Depends(get_db)):
    q = db.query(Mine)
    if risk_level:
        q = q.filter(Mine.current_risk_level == risk_level)
    return q.order_by(Mine.current_risk_probability.desc()).all()


@router.get("/mines/{mine_id}", response_model=MineOut)
def get_mine(mine_id: str, db: Session = Depends(get_db)):
    mine = db.query(Mine).filter(Mine.id == mine_id).first()
    if not mine:
        raise HTTPException(status_code=404, detail=f"Mine '{mine_id}' not found")
    return mine
