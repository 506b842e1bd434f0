"""
app/api/routers package marker.
"""

from app.api.routers.daily_import import router as daily_import_router
from app.api.routers.financial_import import router as financial_import_router
from app.api.routers.ledger import router as ledger_router

__all__ = [
    "daily_import_router",
    "financial_import_router",
    "ledger_router",
]
