from fastapi import APIRouter, Query, status
from sqlalchemy import select, or_
from typing import Optional
import logging

from tracker_suite.api.deps import DbSession, TrialUser, EmailServiceDep
from tracker_suite.exceptions import NotFoundError, ValidationError, ExternalServiceError
from tracker_suite.models.client import Client, ClientStatus, Priority
from tracker_suite.models.interaction import Interaction, InteractionType
from tracker_suite.models.journey import MilestoneType
from tracker_suite.schemas.client import ClientCreate, ClientUpdate, ClientResponse
from tracker_suite.schemas.email import SendEmailRequest, SendEmailResponse
from tracker_suite.services.email_service import EMAIL_TEMPLATES, render_email_template
from tracker_suite.services.journey_service import JourneyService

logger = logging.getLogger(__name__)

router = APIRouter()

CLIENT_MILESTONES = (
    MilestoneType.first_client_added,
    MilestoneType.five_clients_milestone,
    MilestoneType.twenty_clients_milestone,
)


async def get_owned_client(db, client_id: int, user_id: int) -> Client:
    """Load a client owned by ``user_id``; other users' clients are reported as missing."""
    result = await db.execute(
        select(Client).where(Client.id == client_id, Client.user_id == user_id)
    )
    client = result.scalar_one_or_none()
    if not client:
        raise NotFoundError("Client", client_id)
    return client


@router.get("", response_model=list[ClientResponse])
async def list_clients(
    db: DbSession,
    current_user: TrialUser,
    status: Optional[ClientStatus] = None,
    priority: Optional[Priority] = None,
):
    """List the current user's clients, newest first."""
    query = select(Client).where(Client.user_id == current_user.id)
    if status:
        query = query.where(Client.status == status)
    if priority:
        query = query.where(Client.priority == priority)
    query = query.order_by(Client.created_at.desc(), Client.id.desc())

    result = await db.execute(query)
    return result.scalars().all()


@router.get("/search", response_model=list[ClientResponse])
async def search_clients(
    db: DbSession,
    current_user: TrialUser,
    q: str = Query(..., min_length=1),
):
    """Case-insensitive match on name, email or company."""
    pattern = f"%{q}%"
    result = await db.execute(
        select(Client)
        .where(
            Client.user_id == current_user.id,
            or_(
                Client.name.ilike(pattern),
                Client.email.ilike(pattern),
                Client.company.ilike(pattern),
            ),
        )
        .order_by(Client.name)
    )
    return result.scalars().all()


@router.get("/{client_id}", response_model=ClientResponse)
async def get_client(
    client_id: int,
    db: DbSession,
    current_user: TrialUser,
):
    return await get_owned_client(db, client_id, current_user.id)


@router.post("", response_model=ClientResponse, status_code=status.HTTP_201_CREATED)
async def create_client(
    client_data: ClientCreate,
    db: DbSession,
    current_user: TrialUser,
):
    client = Client(user_id=current_user.id, **client_data.model_dump())
    db.add(client)
    await db.commit()
    await db.refresh(client)

    logger.info("Client created", extra={"client_id": client.id, "user_id": current_user.id})

    journey = JourneyService(db)
    for milestone in CLIENT_MILESTONES:
        await journey.check_and_complete_milestone(current_user.id, milestone)

    return client


@router.put("/{client_id}", response_model=ClientResponse)
async def update_client(
    client_id: int,
    client_data: ClientUpdate,
    db: DbSession,
    current_user: TrialUser,
):
    client = await get_owned_client(db, client_id, current_user.id)

    update_data = client_data.model_dump(exclude_unset=True)
    for field, value in update_data.items():
        setattr(client, field, value)

    await db.commit()
    await db.refresh(client)
    return client


@router.delete("/{client_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_client(
    client_id: int,
    db: DbSession,
    current_user: TrialUser,
):
    """Delete a client together with its follow-ups and interactions."""
    client = await get_owned_client(db, client_id, current_user.id)
    await db.delete(client)
    await db.commit()
    logger.info("Client deleted", extra={"client_id": client_id, "user_id": current_user.id})


@router.post("/{client_id}/send-email", response_model=SendEmailResponse)
async def send_client_email(
    client_id: int,
    request: SendEmailRequest,
    db: DbSession,
    current_user: TrialUser,
    email_service: EmailServiceDep,
):
    """Email a client directly or through a template, then log it as an interaction."""
    client = await get_owned_client(db, client_id, current_user.id)

    subject = request.subject
    html = request.message
    if request.template:
        if request.template not in EMAIL_TEMPLATES:
            raise ValidationError(
                f"Unknown email template '{request.template}'",
                errors=[{"field": "template", "message": "Unknown template"}],
            )
        rendered = render_email_template(
            request.template,
            {
                "clientName": client.name,
                "senderName": request.from_name or current_user.full_name,
                "message": request.message,
                "topic": request.subject,
                "projectName": request.subject or "Your Project",
            },
        )
        subject = rendered["subject"]
        html = rendered["html"]

    if not subject or not html:
        raise ValidationError("Subject and message are required when no template is used")

    result = await email_service.send_email(
        to=client.email,
        to_name=client.name,
        subject=subject,
        html_body=html,
        from_address=request.from_email,
        from_name=request.from_name,
    )
    if not result.get("success"):
        raise ExternalServiceError("Email", result.get("error") or "Failed to send email")

    db.add(
        Interaction(
            user_id=current_user.id,
            client_id=client.id,
            type=InteractionType.email,
            notes=f"Email sent: {subject}",
        )
    )
    await db.commit()

    await JourneyService(db).complete_milestone(current_user.id, MilestoneType.first_email_sent)

    return SendEmailResponse(message_id=result.get("message_id"))
