"""
Medicine repository
"""
from datetime import date, datetime
from typing import Any, Dict, Iterable, List, Optional
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select, and_, or_, desc

from medilinko.infrastructure.database.repository.base import BaseRepository
from medilinko.infrastructure.database.models.medicine import (
    Medicine,
    MedicineDose,
    MedicineTakenRecord,
    DoseFrequency,
)


def build_dose(data: Dict[str, Any]) -> MedicineDose:
    """
    Build a dose row from request data

    Args:
        data: dict with time, frequency, days_of_week, instruction

    Returns:
        unsaved MedicineDose
    """
    days = data.get("days_of_week") or []
    return MedicineDose(
        time=data["time"].strip(),
        instruction=data.get("instruction"),
        frequency=DoseFrequency(data.get("frequency") or DoseFrequency.DAILY),
        days_of_week=sorted({int(d) for d in days}),
    )


class MedicineRepository(BaseRepository[Medicine]):
    """Medicine repository"""

    def __init__(self, session: AsyncSession):
        """
        Initialise the medicine repository

        Args:
            session: database session
        """
        super().__init__(session, Medicine)

    async def get_detail(self, id: str) -> Optional[Medicine]:
        """
        Fetch a medicine with freshly loaded doses and taken-history

        Args:
            id: medicine ID

        Returns:
            medicine or None
        """
        result = await self.session.execute(
            select(Medicine)
            .where(Medicine.id == id)
            .execution_options(populate_existing=True)
        )
        return result.scalar_one_or_none()

    async def get_active_by_user_id(self, user_id: str) -> List[Medicine]:
        """
        Active medicines of a patient

        Args:
            user_id: patient ID

        Returns:
            medicines, newest first
        """
        result = await self.session.execute(
            select(Medicine)
            .where(
                and_(
                    Medicine.user_id == user_id,
                    Medicine.is_active.is_(True)
                )
            )
            .order_by(desc(Medicine.created_at))
        )
        return list(result.scalars().all())

    async def get_schedulable(self, today: date) -> List[Medicine]:
        """
        Active medicines whose course has not ended before today

        Args:
            today: the current local date

        Returns:
            medicines with end_date unset or on/after today
        """
        result = await self.session.execute(
            select(Medicine)
            .where(
                and_(
                    Medicine.is_active.is_(True),
                    or_(
                        Medicine.end_date.is_(None),
                        Medicine.end_date >= today
                    )
                )
            )
        )
        return list(result.scalars().all())

    async def get_doses(self, medicine_id: str) -> List[MedicineDose]:
        """
        Doses of a medicine

        Args:
            medicine_id: medicine ID

        Returns:
            doses ordered by time string
        """
        result = await self.session.execute(
            select(MedicineDose)
            .where(MedicineDose.medicine_id == medicine_id)
            .order_by(MedicineDose.time)
        )
        return list(result.scalars().all())

    async def create_with_doses(
        self,
        user_id: str,
        medicine_name: str,
        dosage: str,
        start_date: Optional[date] = None,
        end_date: Optional[date] = None,
        notes: Optional[str] = None,
        doses: Optional[Iterable[Dict[str, Any]]] = None,
    ) -> Medicine:
        """
        Create a medicine together with its doses

        Args:
            user_id: owning patient
            medicine_name: name
            dosage: dosage label
            start_date: first day (optional)
            end_date: last day (optional)
            notes: notes
            doses: dose dicts (see build_dose)

        Returns:
            the created medicine
        """
        medicine = Medicine(
            user_id=user_id,
            medicine_name=medicine_name.strip(),
            dosage=dosage.strip(),
            start_date=start_date,
            end_date=end_date,
            notes=notes,
            is_active=True,
            doses=[build_dose(d) for d in doses or []],
            taken_history=[],
        )
        self.session.add(medicine)
        await self.session.flush()
        return medicine

    async def replace_doses(self, medicine: Medicine, doses: Iterable[Dict[str, Any]]) -> Medicine:
        """
        Replace the whole dose set of a medicine

        Args:
            medicine: loaded medicine
            doses: new dose dicts

        Returns:
            the medicine
        """
        medicine.doses = [build_dose(d) for d in doses]
        await self.session.flush()
        return medicine

    async def soft_delete(self, medicine: Medicine) -> Medicine:
        """
        Deactivate a medicine

        Args:
            medicine: loaded medicine

        Returns:
            the medicine
        """
        medicine.is_active = False
        await self.session.flush()
        return medicine

    async def find_taken_record(
        self,
        medicine_id: str,
        date_key: str,
        time: str
    ) -> Optional[MedicineTakenRecord]:
        """
        Look up the taken-record of one dose occurrence

        Args:
            medicine_id: medicine ID
            date_key: YYYY-MM-DD
            time: dose time string

        Returns:
            record or None
        """
        result = await self.session.execute(
            select(MedicineTakenRecord)
            .where(
                and_(
                    MedicineTakenRecord.medicine_id == medicine_id,
                    MedicineTakenRecord.date == date_key,
                    MedicineTakenRecord.time == time
                )
            )
            .limit(1)
        )
        return result.scalars().first()

    async def add_taken_record(
        self,
        medicine: Medicine,
        date_key: str,
        time: str,
        taken_at: Optional[datetime] = None
    ) -> Optional[MedicineTakenRecord]:
        """
        Append a taken-record unless the occurrence is already marked

        Args:
            medicine: loaded medicine
            date_key: YYYY-MM-DD
            time: dose time string
            taken_at: when it was marked (defaults to now)

        Returns:
            the new record, or None if one already existed
        """
        existing = await self.find_taken_record(medicine.id, date_key, time)
        if existing:
            return None

        record = MedicineTakenRecord(
            date=date_key,
            time=time,
            taken_at=taken_at or datetime.now(),
        )
        medicine.taken_history.append(record)
        await self.session.flush()
        return record

    async def remove_taken_record(self, medicine_id: str, date_key: str, time: str) -> bool:
        """
        Remove the taken-record of one dose occurrence

        Args:
            medicine_id: medicine ID
            date_key: YYYY-MM-DD
            time: dose time string

        Returns:
            whether a record was removed
        """
        record = await self.find_taken_record(medicine_id, date_key, time)
        if not record:
            return False
        await self.session.delete(record)
        await self.session.flush()
        return True

    async def get_taken_records_on(
        self,
        medicine_ids: List[str],
        date_key: str
    ) -> List[MedicineTakenRecord]:
        """
        Taken-records of several medicines on one day

        Args:
            medicine_ids: medicine IDs
            date_key: YYYY-MM-DD

        Returns:
            records
        """
        if not medicine_ids:
            return []
        result = await self.session.execute(
            select(MedicineTakenRecord)
            .where(
                and_(
                    MedicineTakenRecord.medicine_id.in_(medicine_ids),
                    MedicineTakenRecord.date == date_key
                )
            )
        )
        return list(result.scalars().all())
