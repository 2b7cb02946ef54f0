"""CSV export for clients and follow-ups."""

import csv
import io
from datetime import datetime
from typing import Any, Callable, Iterable, Mapping, Optional, Sequence

from tracker_suite.exceptions import ValidationError


def _text(value: Any) -> str:
    if value is None:
        return ""
    if isinstance(value, datetime):
        return value.isoformat()
    if hasattr(value, "value"):
        return str(value.value)
    return str(value)


# field -> (column header, getter)
CLIENT_FIELDS: dict[str, tuple[str, Callable[[Any], Any]]] = {
    "name": ("Name", lambda c: c.name),
    "email": ("Email", lambda c: c.email),
    "phone": ("Phone", lambda c: c.phone),
    "company": ("Company", lambda c: c.company),
    "position": ("Position", lambda c: c.position),
    "status": ("Status", lambda c: c.status),
    "priority": ("Priority", lambda c: c.priority),
    "category": ("Category", lambda c: c.category),
    "source": ("Source", lambda c: c.source),
    "tags": ("Tags", lambda c: ";".join(c.tags or [])),
    "last_contact_date": ("Last Contact", lambda c: c.last_contact_date),
    "created_at": ("Created At", lambda c: c.created_at),
    "updated_at": ("Updated At", lambda c: c.updated_at),
    "notes": ("Notes", lambda c: c.notes),
}
DEFAULT_CLIENT_FIELDS = [
    "name", "email", "phone", "company", "status", "created_at", "updated_at", "notes",
]

FOLLOW_UP_FIELDS: dict[str, tuple[str, Callable[[Any, Mapping[int, Any]], Any]]] = {
    "title": ("Title", lambda f, clients: f.title),
    "client": (
        "Client",
        lambda f, clients: clients[f.client_id].name if f.client_id in clients else "Unknown",
    ),
    "due_date": ("Due Date", lambda f, clients: f.due_date),
    "status": ("Status", lambda f, clients: f.status),
    "priority": ("Priority", lambda f, clients: f.priority),
    "created_at": ("Created At", lambda f, clients: f.created_at),
    "completed_at": ("Completed At", lambda f, clients: f.completed_at),
    "description": ("Description", lambda f, clients: f.description),
}
DEFAULT_FOLLOW_UP_FIELDS = [
    "title", "client", "due_date", "status", "created_at", "completed_at", "description",
]


def parse_fields(raw: Optional[str], available: Mapping[str, Any], default: Sequence[str]) -> list[str]:
    """Parse a comma separated ``fields`` parameter, keeping order and dropping repeats."""
    if not raw:
        return list(default)

    fields: list[str] = []
    for name in raw.split(","):
        name = name.strip()
        if name and name not in fields:
            fields.append(name)

    unknown = [name for name in fields if name not in available]
    if unknown:
        raise ValidationError(
            f"Unknown export fields: {', '.join(unknown)}",
            errors=[{"field": "fields", "message": f"Unsupported field '{name}'"} for name in unknown],
        )
    if not fields:
        return list(default)
    return fields


def clients_to_csv(clients: Iterable[Any], fields: Sequence[str]) -> str:
    output = io.StringIO()
    writer = csv.writer(output, quoting=csv.QUOTE_ALL)
    writer.writerow([CLIENT_FIELDS[name][0] for name in fields])
    for client in clients:
        writer.writerow([_text(CLIENT_FIELDS[name][1](client)) for name in fields])
    return output.getvalue()


def follow_ups_to_csv(
    follow_ups: Iterable[Any], clients: Mapping[int, Any], fields: Sequence[str]
) -> str:
    output = io.StringIO()
    writer = csv.writer(output, quoting=csv.QUOTE_ALL)
    writer.writerow([FOLLOW_UP_FIELDS[name][0] for name in fields])
    for follow_up in follow_ups:
        writer.writerow(
            [_text(FOLLOW_UP_FIELDS[name][1](follow_up, clients)) for name in fields]
        )
    return output.getvalue()
