"""Importers turning ballot exports into Ballot objects."""

from .base import BallotImporter

# Importer registry - import importers here to register them
_importers: list[type[BallotImporter]] = []


def register_importer(importer_class: type[BallotImporter]) -> type[BallotImporter]:
    """Decorator to register an importer class."""
    _importers.append(importer_class)
    return importer_class


def get_all_importers() -> list[type[BallotImporter]]:
    """Return all registered importer classes."""
    return _importers.copy()


def detect_importer(source: str) -> BallotImporter | None:
    """Auto-detect and return an appropriate importer for the given source."""
    for importer_class in _importers:
        importer = importer_class()
        if importer.can_parse(source):
            return importer
    return None


def detect_importer_by_content(content: bytes, source: str) -> BallotImporter | None:
    """Auto-detect an importer by sniffing the export's content."""
    for importer_class in _importers:
        importer = importer_class()
        if importer.can_parse_content(content, source):
            return importer
    return None
