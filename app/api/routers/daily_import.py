"""
app/api/routers/daily_import.py

Scheduled URL import: configuration and on-demand trigger.
"""

from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException, Response, status

from app.api.dependencies import get_unit_of_work
from app.errors import StoreWriteFailedError
from app.repositories.base import UnitOfWork
from app.schemas.financial_import import (
    DailyImportConfigRequest,
    DailyImportConfigResponse,
    DailyImportRunResponse,
)
from app.services.daily_import_service import DailyImportService, get_daily_import_service

router = APIRouter(prefix="/daily-import", tags=["daily-import"])


@router.get("/config", response_model=DailyImportConfigResponse)
def get_daily_import_config(
    uow: UnitOfWork = Depends(get_unit_of_work),
    daily_service: DailyImportService = Depends(get_daily_import_service),
) -> DailyImportConfigResponse:
    return DailyImportConfigResponse.model_validate(daily_service.get_config(uow).to_dict())


@router.put("/config", response_model=DailyImportConfigResponse)
def save_daily_import_config(
    payload: DailyImportConfigRequest,
    uow: UnitOfWork = Depends(get_unit_of_work),
    daily_service: DailyImportService = Depends(get_daily_import_service),
) -> DailyImportConfigResponse:
    """
    Replace enabled/source_url; last_import and import_count are preserved.
    """

    try:
        config = daily_service.save_config(
            uow,
            enabled=payload.enabled,
            source_url=payload.source_url,
        )
    except StoreWriteFailedError as exc:
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=exc.message,
        ) from exc
    return DailyImportConfigResponse.model_validate(config.to_dict())


@router.post("/run", response_model=DailyImportRunResponse)
def run_daily_import(
    response: Response,
    uow: UnitOfWork = Depends(get_unit_of_work),
    daily_service: DailyImportService = Depends(get_daily_import_service),
) -> DailyImportRunResponse:
    """
    Fetch the configured CSV now and import it.
    """

    result = daily_service.run(uow)
    response.status_code = result.status_code
    return DailyImportRunResponse.model_validate(result.to_dict())
