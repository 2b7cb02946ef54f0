from fastapi import APIRouter, Query
from fastapi.responses import StreamingResponse
from sqlalchemy import select
from typing import Literal, Optional
import io

from tracker_suite.api.deps import DbSession, TrialUser
from tracker_suite.models.client import Client
from tracker_suite.models.follow_up import FollowUp
from tracker_suite.models.journey import MilestoneType
from tracker_suite.schemas.client import ClientResponse
from tracker_suite.schemas.follow_up import FollowUpResponse
from tracker_suite.services.export_service import (
    CLIENT_FIELDS,
    DEFAULT_CLIENT_FIELDS,
    FOLLOW_UP_FIELDS,
    DEFAULT_FOLLOW_UP_FIELDS,
    parse_fields,
    clients_to_csv,
    follow_ups_to_csv,
)
from tracker_suite.services.journey_service import JourneyService

router = APIRouter()

ExportFormat = Literal["csv", "json"]


def _csv_response(content: str, filename: str) -> StreamingResponse:
    return StreamingResponse(
        io.BytesIO(content.encode()),
        media_type="text/csv",
        headers={"Content-Disposition": f'attachment; filename="{filename}"'},
    )


@router.get("/clients")
async def export_clients(
    db: DbSession,
    current_user: TrialUser,
    format: ExportFormat = "csv",
    fields: Optional[str] = Query(None, description="Comma separated CSV columns"),
):
    selected = parse_fields(fields, CLIENT_FIELDS, DEFAULT_CLIENT_FIELDS)
    result = await db.execute(
        select(Client).where(Client.user_id == current_user.id).order_by(Client.id)
    )
    clients = result.scalars().all()

    await JourneyService(db).complete_milestone(current_user.id, MilestoneType.first_export)

    if format == "json":
        return [ClientResponse.model_validate(c) for c in clients]
    return _csv_response(clients_to_csv(clients, selected), "clients.csv")


@router.get("/follow-ups")
async def export_follow_ups(
    db: DbSession,
    current_user: TrialUser,
    format: ExportFormat = "csv",
    fields: Optional[str] = Query(None, description="Comma separated CSV columns"),
):
    selected = parse_fields(fields, FOLLOW_UP_FIELDS, DEFAULT_FOLLOW_UP_FIELDS)
    follow_ups = (
        await db.execute(
            select(FollowUp).where(FollowUp.user_id == current_user.id).order_by(FollowUp.due_date, FollowUp.id)
        )
    ).scalars().all()
    clients = (
        await db.execute(select(Client).where(Client.user_id == current_user.id))
    ).scalars().all()

    await JourneyService(db).complete_milestone(current_user.id, MilestoneType.first_export)

    if format == "json":
        return [FollowUpResponse.model_validate(f) for f in follow_ups]
    return _csv_response(
        follow_ups_to_csv(follow_ups, {c.id: c for c in clients}, selected), "follow-ups.csv"
    )
