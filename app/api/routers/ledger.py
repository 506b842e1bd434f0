"""
app/api/routers/ledger.py

Read endpoints over the daily ledger and the channel statistics snapshot.
"""

from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException, Query, status

from app.api.dependencies import get_unit_of_work
from app.errors import NoLedgerDataError
from app.repositories.base import CHANNEL_STATISTICS_KEY, UnitOfWork
from app.schemas.financial_import import (
    ChannelStatisticsResponse,
    LedgerEntryResponse,
    LedgerSummaryResponse,
    PeriodStatisticsResponse,
)
from app.services.ledger_summary_service import (
    PERIODS,
    LedgerSummaryService,
    get_ledger_summary_service,
)

router = APIRouter(tags=["ledger"])


@router.get("/financial-data", response_model=list[LedgerEntryResponse])
def list_financial_data(
    limit: int = Query(default=30, ge=1, le=1000),
    uow: UnitOfWork = Depends(get_unit_of_work),
) -> list[LedgerEntryResponse]:
    """
    Latest ledger entries, newest first.
    """

    entries = uow.ledger.query(descending=True, limit=limit)
    return [LedgerEntryResponse.model_validate(entry.to_dict()) for entry in entries]


@router.get("/financial-data/summary", response_model=LedgerSummaryResponse)
def get_financial_summary(
    limit: int = Query(default=30, ge=1, le=1000),
    uow: UnitOfWork = Depends(get_unit_of_work),
    summary_service: LedgerSummaryService = Depends(get_ledger_summary_service),
) -> LedgerSummaryResponse:
    return LedgerSummaryResponse.model_validate(summary_service.summary(uow.ledger, limit=limit))


@router.get("/financial-data/statistics", response_model=PeriodStatisticsResponse)
def get_period_statistics(
    period: str = Query(default="daily", description=f"One of: {', '.join(PERIODS)}"),
    uow: UnitOfWork = Depends(get_unit_of_work),
    summary_service: LedgerSummaryService = Depends(get_ledger_summary_service),
) -> PeriodStatisticsResponse:
    """
    Totals, average margin and best/worst day for a daily, weekly or monthly window.
    """

    try:
        statistics = summary_service.period_statistics(uow.ledger, period)
    except ValueError as exc:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=str(exc),
        ) from exc
    except NoLedgerDataError as exc:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=str(exc),
        ) from exc
    return PeriodStatisticsResponse.model_validate(statistics.to_dict())


@router.get("/channel-statistics", response_model=ChannelStatisticsResponse)
def get_channel_statistics(
    uow: UnitOfWork = Depends(get_unit_of_work),
) -> ChannelStatisticsResponse:
    document = uow.settings.get_by_key(CHANNEL_STATISTICS_KEY)
    if document is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="No channel statistics have been imported yet.",
        )
    return ChannelStatisticsResponse.model_validate(document)
