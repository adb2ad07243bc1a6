from __future__ import annotations

import logging
from typing import Optional, Sequence

from ..common.validators import require_non_empty
from ..core.enums import Role
from ..core.exceptions import AuthorizationError, NotFoundError, ValidationError
from ..users.service import SessionUser
from .model import Event
from .repository import EventRepository

logger = logging.getLogger(__name__)

NO_EVENT_LABEL = "N/A"
UNKNOWN_EVENT_LABEL = "Unknown Event"


class EventService:
    def __init__(self, events: EventRepository):
        self._events = events

    @staticmethod
    def _require_admin(actor: SessionUser) -> None:
        if actor.role != Role.ADMIN:
            raise AuthorizationError("You do not have permission to manage events")

    def list_events(self) -> Sequence[Event]:
        return list(self._events.list_all())

    def get(self, event_id: str) -> Event:
        event = self._events.get_by_id(event_id)
        if not event:
            raise NotFoundError("Event does not exist")
        return event

    def exists(self, event_id: str) -> bool:
        return self._events.get_by_id(event_id) is not None

    def name_lookup(self) -> dict[str, str]:
        return {e.event_id: e.name for e in self._events.list_all()}

    @staticmethod
    def display_name(event_id: Optional[str], names: dict[str, str]) -> str:
        if not event_id:
            return NO_EVENT_LABEL
        return names.get(event_id, UNKNOWN_EVENT_LABEL)

    def create_event(self, *, actor: SessionUser, name: str, description: str) -> str:
        self._require_admin(actor)
        name = require_non_empty(name, "Event name")
        description = require_non_empty(description, "Description")
        event_id = self._events.create(name=name, description=description)
        logger.info("Admin %s created event %s", actor.user_id, event_id)
        return event_id

    def update_event(self, *, actor: SessionUser, event_id: str, name: str, description: str) -> None:
        self._require_admin(actor)
        name = require_non_empty(name, "Event name")
        description = require_non_empty(description, "Description")
        if not self._events.get_by_id(event_id):
            raise NotFoundError("Event does not exist")
        if not self._events.update(event_id, name=name, description=description):
            raise ValidationError("Could not update the event")

    def delete_event(self, *, actor: SessionUser, event_id: str) -> None:
        self._require_admin(actor)
        if not self._events.delete(event_id):
            raise NotFoundError("Event does not exist")
