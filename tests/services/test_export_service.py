"""
Tests for CSV export.
"""

import csv
import io
from datetime import datetime
from types import SimpleNamespace

import pytest

from tracker_suite.exceptions import ValidationError
from tracker_suite.models.client import ClientStatus, Priority
from tracker_suite.models.follow_up import FollowUpStatus
from tracker_suite.services.export_service import (
    CLIENT_FIELDS,
    DEFAULT_CLIENT_FIELDS,
    clients_to_csv,
    follow_ups_to_csv,
    parse_fields,
    DEFAULT_FOLLOW_UP_FIELDS,
)


def read_csv(text):
    return list(csv.reader(io.StringIO(text)))


CLIENT = SimpleNamespace(
    id=1,
    name='Acme, "The" Corp',
    email="a@acme.com",
    phone=None,
    company="Acme",
    position=None,
    status=ClientStatus.lead,
    priority=Priority.high,
    category=None,
    source=None,
    tags=["vip", "east"],
    last_contact_date=None,
    created_at=datetime(2025, 1, 10, 9, 30),
    updated_at=datetime(2025, 1, 11, 9, 30),
    notes=None,
)


class TestParseFields:
    """Tests for parse_fields."""

    def test_default_when_missing(self):
        assert parse_fields(None, CLIENT_FIELDS, DEFAULT_CLIENT_FIELDS) == DEFAULT_CLIENT_FIELDS
        assert parse_fields("", CLIENT_FIELDS, DEFAULT_CLIENT_FIELDS) == DEFAULT_CLIENT_FIELDS

    def test_keeps_order_and_drops_repeats(self):
        assert parse_fields("email, name,email", CLIENT_FIELDS, DEFAULT_CLIENT_FIELDS) == [
            "email", "name",
        ]

    def test_unknown_field_rejected(self):
        with pytest.raises(ValidationError) as exc_info:
            parse_fields("name,password", CLIENT_FIELDS, DEFAULT_CLIENT_FIELDS)

        assert exc_info.value.status_code == 422
        assert "password" in exc_info.value.detail


class TestClientsCsv:
    """Tests for clients_to_csv."""

    def test_header_and_values(self):
        rows = read_csv(clients_to_csv([CLIENT], ["name", "status", "tags", "created_at", "phone"]))

        assert rows[0] == ["Name", "Status", "Tags", "Created At", "Phone"]
        assert rows[1] == ['Acme, "The" Corp', "lead", "vip;east", "2025-01-10T09:30:00", ""]

    def test_every_cell_is_quoted(self):
        text = clients_to_csv([CLIENT], ["email"])
        assert text.splitlines() == ['"Email"', '"a@acme.com"']

    def test_empty_export_has_header_only(self):
        rows = read_csv(clients_to_csv([], DEFAULT_CLIENT_FIELDS))
        assert len(rows) == 1


class TestFollowUpsCsv:
    """Tests for follow_ups_to_csv."""

    def test_client_name_lookup(self):
        follow_ups = [
            SimpleNamespace(
                title="Call back", client_id=1, due_date=datetime(2025, 2, 1, 10),
                status=FollowUpStatus.pending, priority=Priority.medium,
                created_at=datetime(2025, 1, 20), completed_at=None, description=None,
            ),
            SimpleNamespace(
                title="Orphan", client_id=42, due_date=datetime(2025, 2, 2, 10),
                status=FollowUpStatus.completed, priority=Priority.low,
                created_at=datetime(2025, 1, 20), completed_at=datetime(2025, 1, 21), description="x",
            ),
        ]

        rows = read_csv(follow_ups_to_csv(follow_ups, {1: CLIENT}, DEFAULT_FOLLOW_UP_FIELDS))

        assert rows[0] == [
            "Title", "Client", "Due Date", "Status", "Created At", "Completed At", "Description",
        ]
        assert rows[1][:4] == ["Call back", 'Acme, "The" Corp', "2025-02-01T10:00:00", "pending"]
        assert rows[2][1] == "Unknown"
        assert rows[2][5] == "2025-01-21T00:00:00"
