"""Event notifier that records room events in the application log."""

import json
import logging
from dataclasses import dataclass
from uuid import UUID

from movie_match.domain.events import EventRecord
from movie_match.services.events import EventNotifier


@dataclass
class LoggingEventNotifier(EventNotifier):
    """Writes each event as one JSON log line; delivery is left to log shippers."""

    logger_name: str = "movie_match.events"

    def publish(self, room_id: UUID, record: EventRecord) -> None:
        """Log the event payload."""
        logging.getLogger(self.logger_name).info(
            "ROOM_EVENT:%s room=%s %s",
            record.event_type.value,
            room_id,
            json.dumps(record.to_dict(), sort_keys=True),
        )
