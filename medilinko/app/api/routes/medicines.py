"""
Patient medicine tracker routes
Every change to a medicine re-derives that medicine's reminder timers.
"""
import logging
from datetime import datetime
from typing import List, Optional
from fastapi import APIRouter, HTTPException, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from medilinko.app.api.deps import get_current_user, get_reminder_scheduler
from medilinko.app.api.schemas.medicine import (
    MedicineCreate,
    MedicineUpdate,
    MedicineResponse,
    MedicineDetailResponse,
    CalendarResponse,
    DayScheduleResponse,
    TakenRequest,
    TakenResponse,
)
from medilinko.domain.medicines.calendar import build_day_schedule, build_month_calendar, date_key
from medilinko.domain.reminders.scheduler import ReminderScheduler
from medilinko.infrastructure.database.connection import get_async_session
from medilinko.infrastructure.database.models.medicine import Medicine
from medilinko.infrastructure.database.models.user import User
from medilinko.infrastructure.database.repository.medicine_repository import MedicineRepository

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/medicine")


async def _get_owned_medicine(repo: MedicineRepository, id: str, user: User) -> Medicine:
    medicine = await repo.get_detail(id)
    if not medicine:
        raise HTTPException(status_code=404, detail=f"Medicine not found: {id}")
    if medicine.user_id != user.id:
        raise HTTPException(status_code=403, detail="Not authorized to access this medicine")
    return medicine


async def _reschedule(scheduler: Optional[ReminderScheduler], medicine_id: str) -> None:
    if scheduler is None or not scheduler.running:
        return
    created = await scheduler.reschedule_medicine(medicine_id)
    logger.debug(f"Rescheduled medicine {medicine_id}: {created} timers")


@router.post("/add", response_model=MedicineResponse, status_code=status.HTTP_201_CREATED)
async def add_medicine(
    data: MedicineCreate,
    user: User = Depends(get_current_user),
    session: AsyncSession = Depends(get_async_session),
    scheduler: Optional[ReminderScheduler] = Depends(get_reminder_scheduler)
):
    """
    Add a medicine with its doses

    Args:
        data: medicine and doses
        user: caller (X-User-Id)
        session: database session (dependency injection)
        scheduler: reminder scheduler

    Returns:
        the created medicine
    """
    try:
        if data.start_date and data.end_date and data.end_date < data.start_date:
            raise HTTPException(status_code=400, detail="end_date must not be before start_date")

        repo = MedicineRepository(session)
        medicine = await repo.create_with_doses(
            user_id=user.id,
            medicine_name=data.medicine_name,
            dosage=data.dosage,
            start_date=data.start_date,
            end_date=data.end_date,
            notes=data.notes,
            doses=[d.model_dump() for d in data.doses],
        )
        await session.commit()
        medicine = await repo.get_detail(medicine.id)
        logger.info(f"User {user.id} added medicine {medicine.medicine_name} ({len(medicine.doses)} doses)")
    except HTTPException:
        raise
    except Exception as e:
        await session.rollback()
        logger.error(f"Failed to add medicine: {e}", exc_info=True)
        raise HTTPException(status_code=500, detail=f"Failed to add medicine: {str(e)}")

    await _reschedule(scheduler, medicine.id)
    return medicine


@router.get("/list", response_model=List[MedicineResponse])
async def list_medicines(
    user: User = Depends(get_current_user),
    session: AsyncSession = Depends(get_async_session)
):
    """
    Active medicines of the caller, newest first

    Args:
        user: caller (X-User-Id)
        session: database session (dependency injection)

    Returns:
        medicines with doses
    """
    try:
        repo = MedicineRepository(session)
        return await repo.get_active_by_user_id(user.id)
    except Exception as e:
        logger.error(f"Failed to list medicines: {e}", exc_info=True)
        raise HTTPException(status_code=500, detail=f"Query failed: {str(e)}")


@router.get("/calendar", response_model=CalendarResponse)
async def get_calendar(
    month: int = Query(..., ge=1, le=12),
    year: int = Query(..., ge=1970, le=9999),
    user: User = Depends(get_current_user),
    session: AsyncSession = Depends(get_async_session)
):
    """
    Dose occurrences for every day of a month

    Args:
        month: 1-12
        year: calendar year
        user: caller (X-User-Id)
        session: database session (dependency injection)

    Returns:
        {"YYYY-MM-DD": [entries]}
    """
    try:
        repo = MedicineRepository(session)
        medicines = await repo.get_active_by_user_id(user.id)
        return CalendarResponse(month=month, year=year, data=build_month_calendar(medicines, year, month))
    except Exception as e:
        logger.error(f"Failed to build calendar: {e}", exc_info=True)
        raise HTTPException(status_code=500, detail=f"Query failed: {str(e)}")


@router.get("/by-date", response_model=DayScheduleResponse)
async def get_by_date(
    date: str = Query(..., description="YYYY-MM-DD"),
    user: User = Depends(get_current_user),
    session: AsyncSession = Depends(get_async_session)
):
    """
    Dose occurrences of one day with their taken flags

    Args:
        date: YYYY-MM-DD
        user: caller (X-User-Id)
        session: database session (dependency injection)

    Returns:
        entries sorted by time
    """
    try:
        day = datetime.strptime(date, "%Y-%m-%d").date()
    except ValueError:
        raise HTTPException(status_code=400, detail=f"Invalid date: {date}")

    try:
        repo = MedicineRepository(session)
        medicines = await repo.get_active_by_user_id(user.id)
        key = date_key(day)
        records = await repo.get_taken_records_on([m.id for m in medicines], key)
        taken = {(r.medicine_id, r.time) for r in records}
        return DayScheduleResponse(date=key, data=build_day_schedule(medicines, day, taken))
    except Exception as e:
        logger.error(f"Failed to build day schedule: {e}", exc_info=True)
        raise HTTPException(status_code=500, detail=f"Query failed: {str(e)}")


@router.get("/{id}", response_model=MedicineDetailResponse)
async def get_medicine(
    id: str,
    user: User = Depends(get_current_user),
    session: AsyncSession = Depends(get_async_session)
):
    """
    One medicine with doses and taken-history

    Args:
        id: medicine ID
        user: caller (X-User-Id)
        session: database session (dependency injection)

    Returns:
        the medicine
    """
    try:
        repo = MedicineRepository(session)
        return await _get_owned_medicine(repo, id, user)
    except HTTPException:
        raise
    except Exception as e:
        logger.error(f"Failed to get medicine: {e}", exc_info=True)
        raise HTTPException(status_code=500, detail=f"Query failed: {str(e)}")


@router.put("/update/{id}", response_model=MedicineResponse)
async def update_medicine(
    id: str,
    data: MedicineUpdate,
    user: User = Depends(get_current_user),
    session: AsyncSession = Depends(get_async_session),
    scheduler: Optional[ReminderScheduler] = Depends(get_reminder_scheduler)
):
    """
    Partially update a medicine; doses, when present, replace the whole set

    Args:
        id: medicine ID
        data: fields to change
        user: caller (X-User-Id)
        session: database session (dependency injection)
        scheduler: reminder scheduler

    Returns:
        the updated medicine
    """
    try:
        repo = MedicineRepository(session)
        medicine = await _get_owned_medicine(repo, id, user)

        # only fields sent in the request are changed; null clears an optional field
        update_data = data.model_dump(exclude={"doses"}, exclude_unset=True)
        for required in ("medicine_name", "dosage"):
            if required in update_data and update_data[required] is None:
                raise HTTPException(status_code=400, detail=f"{required} cannot be null")
        start = update_data.get("start_date", medicine.start_date)
        end = update_data.get("end_date", medicine.end_date)
        if start and end and end < start:
            raise HTTPException(status_code=400, detail="end_date must not be before start_date")

        for key, value in update_data.items():
            setattr(medicine, key, value.strip() if isinstance(value, str) else value)
        if data.doses is not None:
            await repo.replace_doses(medicine, [d.model_dump() for d in data.doses])
        await session.commit()
        medicine = await repo.get_detail(id)
        logger.info(f"User {user.id} updated medicine {id}")
    except HTTPException:
        raise
    except Exception as e:
        await session.rollback()
        logger.error(f"Failed to update medicine: {e}", exc_info=True)
        raise HTTPException(status_code=500, detail=f"Update failed: {str(e)}")

    await _reschedule(scheduler, id)
    return medicine


@router.delete("/delete/{id}")
async def delete_medicine(
    id: str,
    user: User = Depends(get_current_user),
    session: AsyncSession = Depends(get_async_session),
    scheduler: Optional[ReminderScheduler] = Depends(get_reminder_scheduler)
):
    """
    Soft delete a medicine and cancel its reminders

    Args:
        id: medicine ID
        user: caller (X-User-Id)
        session: database session (dependency injection)
        scheduler: reminder scheduler

    Returns:
        result message
    """
    try:
        repo = MedicineRepository(session)
        medicine = await _get_owned_medicine(repo, id, user)
        await repo.soft_delete(medicine)
        await session.commit()
        logger.info(f"User {user.id} deleted medicine {id}")
    except HTTPException:
        raise
    except Exception as e:
        await session.rollback()
        logger.error(f"Failed to delete medicine: {e}", exc_info=True)
        raise HTTPException(status_code=500, detail=f"Delete failed: {str(e)}")

    if scheduler is not None:
        scheduler.cancel_medicine(id)
    return {"success": True, "message": "Medicine deleted"}


@router.post("/{id}/mark-taken", response_model=TakenResponse)
async def mark_taken(
    id: str,
    data: TakenRequest,
    user: User = Depends(get_current_user),
    session: AsyncSession = Depends(get_async_session)
):
    """
    Mark one dose occurrence as taken (idempotent per date and time)

    Args:
        id: medicine ID
        data: {date, time}
        user: caller (X-User-Id)
        session: database session (dependency injection)

    Returns:
        result
    """
    try:
        repo = MedicineRepository(session)
        medicine = await _get_owned_medicine(repo, id, user)
        record = await repo.add_taken_record(medicine, data.date, data.time.strip())
        await session.commit()
        if record is None:
            message = "Already marked as taken"
        else:
            message = "Marked as taken"
            logger.info(f"Medicine {id} taken on {data.date} at {data.time}")
        return TakenResponse(success=True, message=message, date=data.date, time=data.time.strip())
    except HTTPException:
        raise
    except Exception as e:
        await session.rollback()
        logger.error(f"Failed to mark medicine taken: {e}", exc_info=True)
        raise HTTPException(status_code=500, detail=f"Update failed: {str(e)}")


@router.delete("/{id}/unmark-taken", response_model=TakenResponse)
async def unmark_taken(
    id: str,
    data: TakenRequest,
    user: User = Depends(get_current_user),
    session: AsyncSession = Depends(get_async_session)
):
    """
    Remove the taken mark of one dose occurrence

    Args:
        id: medicine ID
        data: {date, time}
        user: caller (X-User-Id)
        session: database session (dependency injection)

    Returns:
        result
    """
    try:
        repo = MedicineRepository(session)
        await _get_owned_medicine(repo, id, user)
        removed = await repo.remove_taken_record(id, data.date, data.time.strip())
        if not removed:
            raise HTTPException(status_code=404, detail="No taken record for this date and time")
        await session.commit()
        return TakenResponse(success=True, message="Unmarked", date=data.date, time=data.time.strip())
    except HTTPException:
        raise
    except Exception as e:
        await session.rollback()
        logger.error(f"Failed to unmark medicine: {e}", exc_info=True)
        raise HTTPException(status_code=500, detail=f"Update failed: {str(e)}")
