from fastapi import APIRouter

from tracker_suite.api.deps import TrialUser
from tracker_suite.schemas.email import EmailTemplateInfo
from tracker_suite.services.email_service import list_email_templates

router = APIRouter()


@router.get("/templates", response_model=list[EmailTemplateInfo])
async def get_email_templates(current_user: TrialUser):
    return list_email_templates()
