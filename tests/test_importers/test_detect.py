"""Tests for importer detection."""

# Import importers to register them
from fanvote.importers import csv_rows  # noqa: F401
from fanvote.importers import documents  # noqa: F401

from fanvote.importers import detect_importer, detect_importer_by_content, get_all_importers
from fanvote.importers.csv_rows import CsvExportImporter
from fanvote.importers.documents import DocumentExportImporter


class TestDetectImporter:
    def test_registered(self):
        assert {CsvExportImporter, DocumentExportImporter} <= set(get_all_importers())

    def test_by_name(self):
        assert isinstance(detect_importer("rankings.json"), DocumentExportImporter)
        assert isinstance(detect_importer("ballots.csv"), CsvExportImporter)

    def test_unknown_name(self):
        assert detect_importer("https://example.com/api/export") is None


class TestDetectImporterByContent:
    def test_detects_documents(self, documents_json):
        importer = detect_importer_by_content(documents_json, "export")
        assert isinstance(importer, DocumentExportImporter)

    def test_detects_csv(self, ballots_csv):
        importer = detect_importer_by_content(ballots_csv, "export")
        assert isinstance(importer, CsvExportImporter)

    def test_returns_none_for_plain_html(self):
        importer = detect_importer_by_content(b"<html><body>Hello</body></html>", "page")
        assert importer is None

    def test_returns_none_for_empty_content(self):
        assert detect_importer_by_content(b"", "empty") is None
