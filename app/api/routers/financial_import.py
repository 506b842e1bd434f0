"""
app/api/routers/financial_import.py

Financial CSV import HTTP endpoints.
"""

from __future__ import annotations

from fastapi import APIRouter, Depends, Response, UploadFile

from app.api.dependencies import get_csv_upload, get_unit_of_work
from app.repositories.base import UnitOfWork
from app.schemas.financial_import import CsvTextImportRequest, ImportReportResponse
from app.services.financial_import_service import (
    FinancialImportService,
    decode_csv_bytes,
    get_financial_import_service,
)

router = APIRouter(prefix="/financial-import", tags=["financial-import"])


@router.post("/upload", response_model=ImportReportResponse)
def upload_financial_csv(
    response: Response,
    file: UploadFile = Depends(get_csv_upload),
    uow: UnitOfWork = Depends(get_unit_of_work),
    import_service: FinancialImportService = Depends(get_financial_import_service),
) -> ImportReportResponse:
    """
    Import one uploaded CSV into the daily ledger.
    """

    try:
        csv_text = decode_csv_bytes(file.file.read())
    finally:
        file.file.close()

    report = import_service.run_import(csv_text, uow)
    response.status_code = report.status_code
    return ImportReportResponse.model_validate(report.to_dict())


@router.post("/text", response_model=ImportReportResponse)
def import_financial_csv_text(
    payload: CsvTextImportRequest,
    response: Response,
    uow: UnitOfWork = Depends(get_unit_of_work),
    import_service: FinancialImportService = Depends(get_financial_import_service),
) -> ImportReportResponse:
    """
    Import CSV text posted as JSON.
    """

    report = import_service.run_import(payload.csv_content, uow)
    response.status_code = report.status_code
    return ImportReportResponse.model_validate(report.to_dict())
