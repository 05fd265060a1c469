"""
Reminder scheduler admin routes
"""
import logging
from typing import Optional
from fastapi import APIRouter, HTTPException, Depends

from medilinko.app.api.deps import get_reminder_scheduler
from medilinko.app.api.schemas.reminders import (
    PendingReminder,
    SchedulerStatusResponse,
    RebuildResponse,
)
from medilinko.domain.reminders.scheduler import ReminderScheduler

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/reminders")


@router.get("/status", response_model=SchedulerStatusResponse)
async def scheduler_status(
    scheduler: Optional[ReminderScheduler] = Depends(get_reminder_scheduler)
):
    """
    Scheduler state and pending reminders ordered by fire time

    Returns:
        status
    """
    if scheduler is None:
        return SchedulerStatusResponse(enabled=False, running=False, pending_count=0, pending=[])

    pending = [
        PendingReminder(
            key=str(timer.key),
            medicine_id=timer.key.medicine_id,
            dose_time=timer.key.dose_time,
            fire_at=timer.fire_at,
        )
        for timer in scheduler.registry.pending()
    ]
    return SchedulerStatusResponse(
        enabled=True,
        running=scheduler.running,
        pending_count=len(pending),
        pending=pending,
    )


@router.post("/rebuild", response_model=RebuildResponse)
async def rebuild_schedule(
    scheduler: Optional[ReminderScheduler] = Depends(get_reminder_scheduler)
):
    """
    Rebuild the whole reminder schedule now

    Returns:
        number of pending reminders afterwards
    """
    if scheduler is None:
        raise HTTPException(status_code=503, detail="Reminder scheduler is disabled")
    count = await scheduler.rebuild()
    logger.info(f"Manual reminder rebuild: {count} timers pending")
    return RebuildResponse(success=True, pending_count=count)
