"""
Persisted payment listing
"""

import structlog
from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse
from starlette.concurrency import run_in_threadpool

from api.schemas import ErrorResponse, PaymentRecordOut
from core.dependencies import get_payment_store
from core.logging import BusinessEvents
from db.store import PaymentRecordStore, PersistenceError

log = structlog.get_logger(__name__)

router = APIRouter(tags=["Payments"])


@router.get(
    "/payments",
    response_model=list[PaymentRecordOut],
    responses={500: {"model": ErrorResponse}},
)
async def list_payments(store: PaymentRecordStore = Depends(get_payment_store)):
    """Return every completed capture recorded so far."""
    try:
        records = await run_in_threadpool(store.list_all)
    except PersistenceError as e:
        log.error(BusinessEvents.PAYMENT_LIST_FAILED, error=str(e))
        return JSONResponse(
            status_code=500, content={"error": "Failed to fetch payments"}
        )
    return records
