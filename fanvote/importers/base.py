"""Abstract base class for ballot importers."""

from abc import ABC, abstractmethod
from datetime import datetime

from fanvote.models import Ballot


class BallotFormatError(ValueError):
    """Raised when a ballot export cannot be read."""
    pass


def parse_timestamp(value: str | None) -> datetime | None:
    """Parse an ISO 8601 timestamp, accepting a trailing ``Z``.

    Raises:
        BallotFormatError: If the value is present but not a timestamp
    """
    if not value:
        return None
    try:
        return datetime.fromisoformat(str(value).replace("Z", "+00:00"))
    except ValueError as e:
        raise BallotFormatError(f"Invalid timestamp: {value!r}") from e


class BallotImporter(ABC):
    """Abstract base class for reading ballot exports.

    Each importer handles one export format. Importers are registered via the
    @register_importer decorator in fanvote/importers/__init__.py.
    """

    @abstractmethod
    def can_parse(self, source: str) -> bool:
        """Check if this importer can handle the given source.

        Args:
            source: URL or filename to check

        Returns:
            True if this importer can handle the source, False otherwise
        """
        pass

    def can_parse_content(self, content: bytes, filename: str) -> bool:
        """Check if this importer can handle the given export content.

        Used when the source name gives nothing away (e.g. an API URL).

        Args:
            content: Raw bytes of the export
            filename: Original filename or URL

        Returns:
            True if this importer can likely handle the content, False otherwise
        """
        return False

    @abstractmethod
    def parse(self, source: str, content: bytes) -> list[Ballot]:
        """Parse the content into ballots.

        Args:
            source: Original URL or filename (for context)
            content: Raw bytes of the export

        Returns:
            Ballots in export order

        Raises:
            BallotFormatError: If the content cannot be parsed
        """
        pass
