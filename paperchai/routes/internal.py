"""
Internal endpoints triggered by the scheduler (cron), not by users
"""

import hmac
import logging
from typing import Optional

from fastapi import APIRouter, Depends, Header, HTTPException
from fastapi.responses import JSONResponse
from sqlalchemy.orm import Session

from .. import config
from ..database import get_db
from ..services.reminder_worker import process_due_reminders

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/internal", tags=["Internal"])


def constant_time_compare(a: Optional[str], b: Optional[str]) -> bool:
    """Compare two strings in constant time to prevent timing attacks"""
    if not a or not b:
        return False
    return hmac.compare_digest(a, b)


def verify_cron_secret(x_cron_secret: Optional[str] = Header(default=None)) -> None:
    if not config.INTERNAL_CRON_SECRET:
        logger.error("❌ INTERNAL_CRON_SECRET not configured - refusing internal run")
        raise HTTPException(status_code=503, detail="Internal runs are not configured")
    if not constant_time_compare(x_cron_secret, config.INTERNAL_CRON_SECRET):
        logger.warning("⚠️ Internal reminder run rejected: bad cron secret")
        raise HTTPException(status_code=401, detail="Unauthorized")


@router.post("/reminders/run", dependencies=[Depends(verify_cron_secret)])
async def run_reminders(db: Session = Depends(get_db)):
    """Send every reminder step that is due"""
    logger.info("🚀 Reminder run started")
    try:
        return process_due_reminders(db)
    except Exception:
        return JSONResponse(status_code=500, content={"error": "Worker failed"})
