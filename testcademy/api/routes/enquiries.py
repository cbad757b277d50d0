"""
Enquiry API Endpoints

POST /api/v1/enquiries - Public enquiry submission (contact form, enrollment modal)
GET /api/v1/admin/enquiries - Filtered enquiry list with status counts
GET /api/v1/admin/enquiries/counts - Status counts only
GET /api/v1/admin/enquiries/{id} - Enquiry detail
PUT /api/v1/admin/enquiries/{id} - Status/notes update
GET /api/v1/admin/enquiries/{id}/contact-links - WhatsApp and email links
"""
import logging
from typing import Any, Dict, List, Optional

from fastapi import APIRouter, Depends, Path, Query, status
from pydantic import BaseModel, ConfigDict, Field
from sqlalchemy.ext.asyncio import AsyncSession

from testcademy.api.auth import require_admin
from testcademy.config import settings
from testcademy.database import get_db
from testcademy.services.contact_dispatch import enquiry_contact_links
from testcademy.services.enquiry_review import ALL_STATUSES, EnquiryReviewWorkflow
from testcademy.services.enquiry_submission import EnquirySubmissionService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/v1", tags=["enquiries"])


# Request/Response models
class EnquiryCreate(BaseModel):
    """
    Public enquiry submission.

    Required fields are checked by the submission service, so a blank or
    missing one comes back as VALIDATION_ERROR naming every missing field.
    Accepts the camelCase names the web forms send.
    """
    model_config = ConfigDict(populate_by_name=True)

    full_name: Optional[str] = Field(None, alias="fullName")
    email: Optional[str] = None
    phone: Optional[str] = None
    course_id: Optional[str] = Field(None, alias="courseId")
    course_interest: Optional[str] = Field(None, alias="courseInterest")
    message: Optional[str] = None


class EnquiryStatusUpdate(BaseModel):
    """Admin status transition"""
    model_config = ConfigDict(populate_by_name=True)

    status: str = Field(..., description="pending, contacted, approved or rejected")
    notes: Optional[str] = Field(None, alias="adminNotes", description="Replaces the admin notes")
    expected_version: Optional[int] = Field(
        None,
        ge=1,
        alias="expectedVersion",
        description="Version last seen; rejects the update with 409 if the enquiry changed since",
    )


class EnquiryOut(BaseModel):
    id: str
    full_name: str
    email: str
    phone: Optional[str]
    course_id: Optional[str]
    course_interest: Optional[str]
    message: str
    status: str
    admin_notes: Optional[str]
    version: int
    created_at: str
    updated_at: str


class EnquiryResponse(BaseModel):
    """Standard response wrapper"""
    data: EnquiryOut


class EnquiryListResponse(BaseModel):
    data: List[EnquiryOut]
    metadata: Dict[str, Any]


class ContactLinksResponse(BaseModel):
    data: Dict[str, Any]


@router.post("/enquiries", response_model=EnquiryResponse, status_code=status.HTTP_201_CREATED)
async def submit_enquiry(request: EnquiryCreate, db: AsyncSession = Depends(get_db)):
    """
    Submit a new enquiry.

    Stored in the pending state; no notification is sent.
    """
    service = EnquirySubmissionService(db)
    enquiry = await service.submit(request.model_dump())
    return EnquiryResponse(data=enquiry.to_dict())


@router.get("/admin/enquiries", response_model=EnquiryListResponse)
async def list_enquiries(
    status_filter: str = Query(ALL_STATUSES, alias="status", description="all or one status value"),
    db: AsyncSession = Depends(get_db),
    admin: dict = Depends(require_admin),
):
    """
    List enquiries (newest first) matching the status filter.

    metadata.counts always covers every enquiry, whatever the filter.
    """
    workflow = EnquiryReviewWorkflow(db)
    enquiries = await workflow.list(status_filter)
    counts = await workflow.aggregate_counts()

    return EnquiryListResponse(
        data=[enquiry.to_dict() for enquiry in enquiries],
        metadata={
            "filter": status_filter,
            "counts": counts,
            "total": sum(counts.values()),
            "returned": len(enquiries),
        },
    )


@router.get("/admin/enquiries/counts")
async def get_enquiry_counts(
    db: AsyncSession = Depends(get_db),
    admin: dict = Depends(require_admin),
) -> Dict[str, Any]:
    """Enquiry count per status"""
    counts = await EnquiryReviewWorkflow(db).aggregate_counts()
    return {"data": counts, "metadata": {"total": sum(counts.values())}}


@router.get("/admin/enquiries/{enquiry_id}", response_model=EnquiryResponse)
async def get_enquiry(
    enquiry_id: str = Path(..., description="Enquiry id"),
    db: AsyncSession = Depends(get_db),
    admin: dict = Depends(require_admin),
):
    enquiry = await EnquiryReviewWorkflow(db).get(enquiry_id)
    return EnquiryResponse(data=enquiry.to_dict())


@router.put("/admin/enquiries/{enquiry_id}", response_model=EnquiryResponse)
async def update_enquiry_status(
    request: EnquiryStatusUpdate,
    enquiry_id: str = Path(..., description="Enquiry id"),
    db: AsyncSession = Depends(get_db),
    admin: dict = Depends(require_admin),
):
    """
    Change an enquiry's status and optionally replace its admin notes.

    Any status can move to any other status.
    """
    workflow = EnquiryReviewWorkflow(db)
    enquiry = await workflow.update_status(
        enquiry_id,
        request.status,
        notes=request.notes,
        expected_version=request.expected_version,
    )
    return EnquiryResponse(data=enquiry.to_dict())


@router.get("/admin/enquiries/{enquiry_id}/contact-links", response_model=ContactLinksResponse)
async def get_contact_links(
    enquiry_id: str = Path(..., description="Enquiry id"),
    db: AsyncSession = Depends(get_db),
    admin: dict = Depends(require_admin),
):
    """
    WhatsApp and email links for reaching the student.

    An unusable phone or email only disables that link; the reason is in errors.
    """
    enquiry = await EnquiryReviewWorkflow(db).get(enquiry_id)
    links = enquiry_contact_links(enquiry, settings.contact_team_name)
    return ContactLinksResponse(data={
        "whatsapp": links.whatsapp,
        "email": links.email,
        "errors": links.errors,
    })
