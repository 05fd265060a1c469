"""
Reminder dispatcher
Runs when a dose timer fires: push to the patient's devices, then record the
reminder in the in-app notification feed.

Planning is a pure function (plan_medicine_reminder) returning a description
of the side effects; ReminderDispatcher only looks up tokens and executes it.
"""
import logging
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Sequence, Tuple

from medilinko.domain.reminders.ports import (
    NotificationFeed,
    PatientDirectory,
    PushGateway,
    PushResult,
    ReminderDose,
    ReminderMedicine,
)

logger = logging.getLogger(__name__)

REMINDER_TITLE = "💊 Medicine Reminder"
REMINDER_TYPE = "medicine_reminder"
REMINDER_CHANNEL_ID = "medicine_reminders"


@dataclass(frozen=True)
class PushMessage:
    """One push send"""
    token: str
    title: str
    body: str
    data: Dict[str, str]
    channel_id: str = REMINDER_CHANNEL_ID


@dataclass(frozen=True)
class FeedRecord:
    """One notification feed insert"""
    user_id: str
    title: str
    message: str
    notification_type: str
    data: Dict[str, Any]


@dataclass(frozen=True)
class ReminderEffects:
    """Side effects of one reminder"""
    pushes: Tuple[PushMessage, ...] = ()
    feed_record: Optional[FeedRecord] = None

    @property
    def skipped(self) -> bool:
        """No destination, nothing to do"""
        return not self.pushes and self.feed_record is None


@dataclass
class DispatchReport:
    """What actually happened"""
    effects: ReminderEffects
    results: List[PushResult] = field(default_factory=list)
    recorded: bool = False

    @property
    def delivered(self) -> int:
        return sum(1 for r in self.results if r.success)


def reminder_body(medicine: ReminderMedicine) -> str:
    return f"Time to take {medicine.name} - {medicine.dosage}"


def plan_medicine_reminder(
    medicine: ReminderMedicine,
    dose: ReminderDose,
    tokens: Sequence[str]
) -> ReminderEffects:
    """
    Decide the side effects of a fired reminder

    Args:
        medicine: medicine snapshot
        dose: the dose that fired
        tokens: the patient's push tokens

    Returns:
        one push per distinct token plus a feed record; nothing at all when
        the patient has no push destination
    """
    distinct = [t for i, t in enumerate(tokens) if t and t not in tokens[:i]]
    if not distinct:
        return ReminderEffects()

    body = reminder_body(medicine)
    push_data = {
        "type": REMINDER_TYPE,
        "medicineId": medicine.id,
        "medicineName": medicine.name or "",
        "dosage": medicine.dosage or "",
        "time": dose.time or "",
        "clickAction": "FLUTTER_NOTIFICATION_CLICK",
    }
    pushes = tuple(
        PushMessage(token=token, title=REMINDER_TITLE, body=body, data=dict(push_data))
        for token in distinct
    )
    feed_record = FeedRecord(
        user_id=medicine.user_id,
        title=REMINDER_TITLE,
        message=body,
        notification_type=REMINDER_TYPE,
        data={
            "medicineId": medicine.id,
            "medicineName": medicine.name,
            "dosage": medicine.dosage,
            "time": dose.time,
        },
    )
    return ReminderEffects(pushes=pushes, feed_record=feed_record)


class ReminderDispatcher:
    """Executes reminder effects against the real collaborators"""

    def __init__(
        self,
        directory: PatientDirectory,
        push_gateway: PushGateway,
        feed: NotificationFeed
    ):
        """
        Args:
            directory: resolves push tokens
            push_gateway: sends pushes
            feed: persists notification records
        """
        self.directory = directory
        self.push_gateway = push_gateway
        self.feed = feed

    async def dispatch(self, medicine: ReminderMedicine, dose: ReminderDose) -> DispatchReport:
        """
        Send the reminder for one fired dose

        Push failures are logged and never raised; the feed record is written
        whatever the push outcome. One attempt per token, no retries.

        Args:
            medicine: medicine snapshot
            dose: the dose that fired

        Returns:
            DispatchReport
        """
        tokens = await self.directory.get_push_tokens(medicine.user_id)
        effects = plan_medicine_reminder(medicine, dose, tokens)
        report = DispatchReport(effects=effects)

        if effects.skipped:
            logger.info(f"No push token found for user {medicine.user_id}, skipping {medicine.name} at {dose.time}")
            return report

        for push in effects.pushes:
            result = await self._send(medicine.user_id, push)
            report.results.append(result)

        logger.info(
            f"Sent reminder for {medicine.name} at {dose.time} "
            f"({report.delivered}/{len(effects.pushes)} devices)"
        )

        record = effects.feed_record
        await self.feed.create(
            record.user_id,
            record.title,
            record.message,
            record.notification_type,
            record.data,
        )
        report.recorded = True
        return report

    async def _send(self, user_id: str, push: PushMessage) -> PushResult:
        try:
            result = await self.push_gateway.send(
                push.token, push.title, push.body, push.data, channel_id=push.channel_id
            )
        except Exception as e:
            logger.error(f"Push send failed for user {user_id}: {e}", exc_info=True)
            return PushResult(success=False, error=str(e))

        if not result.success:
            logger.warning(f"Push rejected for user {user_id}: {result.error}")
            if result.invalid_token:
                try:
                    await self.directory.remove_push_token(user_id, push.token)
                    logger.info(f"Cleared invalid push token for user {user_id}")
                except Exception as e:
                    logger.error(f"Failed to clear push token for user {user_id}: {e}", exc_info=True)
        return result
