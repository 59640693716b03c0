"""Contest conclusion signal.

Status messages for a contest carry ``conclusion_timestamp_utc`` (ISO 8601).
A contest counts as concluded once the current time reaches the timestamp of
the most recently received message. How the messages arrive is up to the
caller.
"""

import logging
from datetime import UTC, datetime
from typing import Any

logger = logging.getLogger(__name__)

TIMESTAMP_FIELD = "conclusion_timestamp_utc"


def parse_conclusion_time(message: dict[str, Any] | None) -> datetime | None:
    """Return the conclusion time in a status message, or None.

    Naive timestamps are taken to be UTC. A trailing ``Z`` is accepted.
    """
    if not message or not message.get(TIMESTAMP_FIELD):
        return None
    raw = str(message[TIMESTAMP_FIELD])
    try:
        parsed = datetime.fromisoformat(raw.replace("Z", "+00:00"))
    except ValueError:
        logger.warning("Unparseable conclusion timestamp: %r", raw)
        return None
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=UTC)
    return parsed


def is_contest_concluded(message: dict[str, Any] | None, now: datetime | None = None) -> bool:
    """Whether the contest described by ``message`` has concluded at ``now``."""
    conclusion = parse_conclusion_time(message)
    if conclusion is None:
        return False
    return (now or datetime.now(UTC)) >= conclusion


class ConclusionSignal:
    """Tracks the latest status message per contest.

    Feed every received message to :meth:`receive`; later messages replace
    earlier ones, so a pushed-back conclusion time reopens the contest.
    """

    def __init__(self):
        self._latest: dict[str, dict[str, Any]] = {}

    def receive(self, contest_id: str | int, message: dict[str, Any]) -> None:
        logger.debug("Status message for contest %s: %s", contest_id, message)
        self._latest[str(contest_id)] = message

    def conclusion_time(self, contest_id: str | int) -> datetime | None:
        return parse_conclusion_time(self._latest.get(str(contest_id)))

    def is_concluded(self, contest_id: str | int, now: datetime | None = None) -> bool:
        return is_contest_concluded(self._latest.get(str(contest_id)), now)
