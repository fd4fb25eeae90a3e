"""Reminder domain operations: validated read-modify-write-notify cycles on reminders."""

from __future__ import annotations

import logging
from typing import Any, Callable, Iterable, List, Mapping, Optional, Union
from uuid import uuid4

from pydantic import ValidationError as PydanticValidationError

from medicart.db.collections import ReminderRepository
from medicart.errors import ValidationError
from medicart.events import EventBus, Topic
from medicart.models.cart import CartItem
from medicart.models.reminder import (
    DEFAULT_ADDED_TIME,
    DEFAULT_REMINDER_TIMES,
    TIME_PATTERN,
    Reminder,
    ReminderDraft,
)

logger = logging.getLogger(__name__)

REQUIRED_FIELDS = ("medication", "dosage")
EDITABLE_FIELDS = {"medication", "dosage", "frequency", "times", "enabled"}

ReminderId = Union[str, int]


def new_reminder_id() -> str:
    return uuid4().hex


def _describe(exc: PydanticValidationError) -> str:
    return "; ".join(
        f"{'.'.join(str(part) for part in error['loc']) or 'reminder'}: {error['msg']}"
        for error in exc.errors()
    )


def _require_fields(values: Mapping[str, Any], fields: Iterable[str]) -> None:
    missing = [name for name in fields if not str(values.get(name) or "").strip()]
    if missing:
        raise ValidationError(f"Missing required field(s): {', '.join(missing)}")


class ReminderService:
    """Mutate the persisted reminder list and announce each change on the bus."""

    def __init__(
        self,
        repository: ReminderRepository,
        bus: EventBus,
        *,
        id_factory: Callable[[], str] = new_reminder_id,
    ) -> None:
        self._repository = repository
        self._bus = bus
        self._id_factory = id_factory

    def items(self) -> List[Reminder]:
        return self._repository.load()

    def create_from_cart(self, cart: Iterable[CartItem]) -> List[Reminder]:
        """Create a twice-daily reminder for every cart item without one.

        Items whose name matches an existing reminder's medication are skipped, so
        repeating the call on the same cart adds nothing.
        """

        reminders = self._repository.load()
        known = {reminder.medication for reminder in reminders}
        added: List[Reminder] = []
        for item in cart:
            if item.name in known:
                continue
            known.add(item.name)
            added.append(
                Reminder(
                    id=self._id_factory(),
                    medication=item.name,
                    dosage=item.dosage,
                    frequency=item.frequency,
                    times=list(DEFAULT_REMINDER_TIMES),
                    enabled=True,
                )
            )
        self._commit(reminders + added)
        logger.info("Created %s reminder(s) from cart", len(added))
        return added

    def create(self, draft: Union[ReminderDraft, Mapping[str, Any]]) -> Reminder:
        """Validate the form payload and append it as an enabled reminder.

        Raises :class:`ValidationError` when medication or dosage is blank or the
        schedule is malformed; the store is left untouched in that case.
        """

        payload = draft.model_dump() if isinstance(draft, ReminderDraft) else dict(draft)
        _require_fields(payload, REQUIRED_FIELDS)
        try:
            form = ReminderDraft.model_validate(payload)
        except PydanticValidationError as exc:
            raise ValidationError(_describe(exc)) from exc

        reminder = Reminder(id=self._id_factory(), enabled=True, **form.model_dump())
        reminders = self._repository.load()
        reminders.append(reminder)
        self._commit(reminders)
        logger.info("Created reminder %s for %s", reminder.id, reminder.medication)
        return reminder

    def toggle(self, reminder_id: ReminderId) -> Optional[Reminder]:
        return self._modify(reminder_id, lambda current: {"enabled": not current.enabled})

    def update(self, reminder_id: ReminderId, fields: Mapping[str, Any]) -> Optional[Reminder]:
        """Merge editable ``fields`` into the matching reminder.

        Unknown keys and ``id`` are ignored. Returns ``None`` when no reminder has
        ``reminder_id``.
        """

        changes = {key: value for key, value in fields.items() if key in EDITABLE_FIELDS}
        _require_fields(changes, [name for name in REQUIRED_FIELDS if name in changes])
        return self._modify(reminder_id, lambda current: changes)

    def delete(self, reminder_id: ReminderId) -> bool:
        reminders = self._repository.load()
        index = self._index_of(reminders, reminder_id)
        if index is None:
            logger.debug("Ignoring delete of unknown reminder %s", reminder_id)
            return False
        removed = reminders.pop(index)
        self._commit(reminders)
        logger.info("Deleted reminder %s for %s", removed.id, removed.medication)
        return True

    def add_time(self, reminder_id: ReminderId, time: str = DEFAULT_ADDED_TIME) -> Optional[Reminder]:
        if not TIME_PATTERN.match(time):
            raise ValidationError(f"Invalid reminder time {time!r}, expected HH:MM")
        return self._modify(reminder_id, lambda current: {"times": [*current.times, time]})

    def remove_time(self, reminder_id: ReminderId, index: int) -> Optional[Reminder]:
        """Drop one scheduled time; the last remaining time is never removed."""

        reminders = self._repository.load()
        position = self._index_of(reminders, reminder_id)
        if position is None:
            return None
        current = reminders[position]
        if len(current.times) <= 1 or not 0 <= index < len(current.times):
            logger.debug("Keeping schedule of reminder %s unchanged", current.id)
            return current
        times = [entry for i, entry in enumerate(current.times) if i != index]
        updated = current.model_copy(update={"times": times})
        reminders[position] = updated
        self._commit(reminders)
        return updated

    def _modify(
        self,
        reminder_id: ReminderId,
        build_changes: Callable[[Reminder], Mapping[str, Any]],
    ) -> Optional[Reminder]:
        reminders = self._repository.load()
        position = self._index_of(reminders, reminder_id)
        if position is None:
            logger.debug("Ignoring change to unknown reminder %s", reminder_id)
            return None
        current = reminders[position]
        try:
            updated = Reminder.model_validate({**current.model_dump(), **build_changes(current)})
        except PydanticValidationError as exc:
            raise ValidationError(_describe(exc)) from exc
        reminders[position] = updated
        self._commit(reminders)
        return updated

    @staticmethod
    def _index_of(reminders: List[Reminder], reminder_id: ReminderId) -> Optional[int]:
        wanted = str(reminder_id)
        for index, reminder in enumerate(reminders):
            if reminder.id == wanted:
                return index
        return None

    def _commit(self, reminders: List[Reminder]) -> None:
        self._repository.save(reminders)
        self._bus.publish(Topic.REMINDERS_CHANGED)


__all__ = ["ReminderService", "new_reminder_id"]
