"""
Complaint Controllers (API Routes)
===================================

FastAPI routes for the maintenance logbook.

Controllers are thin - they resolve the principal, parse the request
and delegate to application services. Application exceptions are turned
into HTTP responses by the handlers registered in main.
"""

import json
from typing import List, Optional, Tuple

from fastapi import APIRouter, Depends, Query, Request, status
from pydantic import ValidationError
from starlette.datastructures import UploadFile

from src.complaints.application import (
    AnalyticsService, ComplaintService, TechnicianService,
    ComplaintCreateDTO, AssignTechnicianDTO, StatusUpdateDTO, TechnicianCreateDTO,
    ComplaintResponse, TechnicianResponse, TechnicianOptionsResponse, AnalyticsResponse,
    ImageUpload,
)
from src.complaints.domain import Principal
from src.complaints.interfaces.dependencies import (
    get_analytics_service,
    get_complaint_service,
    get_current_principal,
    get_technician_service,
)
from src.core import ValidationException
from src.shared.infrastructure.logging import get_logger

logger = get_logger(__name__)

complaints_router = APIRouter(prefix="/api/complaints", tags=["Complaints"])
technicians_router = APIRouter(prefix="/api/technicians", tags=["Technicians"])


# ========== Example payloads for Swagger ==========

COMPLAINT_CREATE_EXAMPLE = {
    "title": "No power in bathroom",
    "description": "The bathroom sockets stopped working this morning.",
    "category": "electricity",
    "priority": "high",
    "roomNumber": "B-204"
}

ANALYTICS_RESPONSE_EXAMPLE = {
    "total": 0,
    "open": 0,
    "inProgress": 0,
    "resolved": 0,
    "escalated": 0,
    "categoryCount": {"electricity": 0, "water": 0, "wifi": 0, "cleaning": 0},
    "avgResponseTime": 0.0,
    "resolutionRate": 0.0
}


# ========== Request parsing ==========

async def _parse_create_request(request: Request) -> Tuple[ComplaintCreateDTO, List[ImageUpload]]:
    """Read a complaint from a JSON body or a multipart form with images."""
    content_type = request.headers.get("content-type", "")

    if content_type.startswith("multipart/form-data"):
        form = await request.form()
        fields = {
            key: form.get(key)
            for key in ("title", "description", "category", "priority", "roomNumber")
            if isinstance(form.get(key), str)
        }
        uploads = []
        for item in form.getlist("images"):
            if isinstance(item, UploadFile):
                uploads.append(ImageUpload(
                    filename=item.filename or "",
                    content_type=item.content_type or "",
                    data=await item.read(),
                ))
        return ComplaintCreateDTO.model_validate(fields), uploads

    try:
        body = await request.json()
    except (json.JSONDecodeError, UnicodeDecodeError) as e:
        raise ValidationException("Request body must be JSON or multipart form data") from e

    try:
        return ComplaintCreateDTO.model_validate(body), []
    except ValidationError as e:
        raise ValidationException("Invalid complaint payload", {"errors": str(e)}) from e


# ========== Complaint routes ==========

@complaints_router.get(
    "",
    response_model=List[ComplaintResponse],
    summary="List complaints",
    description="""
    All complaints, newest first, each with its derived `escalated` flag.

    **Query Parameters:**
    - `status`: all, open, in-progress, resolved or escalated
    - `category`: all, electricity, water, wifi or cleaning
    """
)
async def list_complaints(
    complaint_status: str = Query("all", alias="status", description="Status filter"),
    category: str = Query("all", description="Category filter"),
    principal: Principal = Depends(get_current_principal),
    analytics: AnalyticsService = Depends(get_analytics_service),
):
    now = analytics.now()
    complaints = await analytics.list_filtered(complaint_status, category, now)
    return [ComplaintResponse.from_domain(c, now, analytics.policy) for c in complaints]


@complaints_router.post(
    "",
    response_model=ComplaintResponse,
    status_code=status.HTTP_201_CREATED,
    summary="File a complaint",
    description="""
    File a new complaint as a resident.

    Accepts JSON, or multipart form data with up to 5 `images` files.
    Requests with more images are rejected, nothing is stored.
    """,
    responses={
        400: {"description": "Invalid input"},
        403: {"description": "Only residents may file complaints"}
    },
    openapi_extra={
        "requestBody": {"content": {"application/json": {"example": COMPLAINT_CREATE_EXAMPLE}}}
    }
)
async def create_complaint(
    request: Request,
    principal: Principal = Depends(get_current_principal),
    service: ComplaintService = Depends(get_complaint_service),
    analytics: AnalyticsService = Depends(get_analytics_service),
):
    data, uploads = await _parse_create_request(request)
    complaint = await service.create_complaint(principal, data, uploads)
    return ComplaintResponse.from_domain(complaint, analytics.now(), analytics.policy)


@complaints_router.get(
    "/analytics",
    response_model=AnalyticsResponse,
    summary="Get dashboard analytics",
    responses={
        200: {
            "description": "Summary metrics",
            "content": {"application/json": {"example": ANALYTICS_RESPONSE_EXAMPLE}}
        }
    }
)
async def get_analytics(
    principal: Principal = Depends(get_current_principal),
    analytics: AnalyticsService = Depends(get_analytics_service),
):
    summary = await analytics.summary()
    return AnalyticsResponse.from_domain(summary)


@complaints_router.get(
    "/{complaint_id}",
    response_model=ComplaintResponse,
    summary="Get a complaint",
    responses={404: {"description": "Complaint not found"}}
)
async def get_complaint(
    complaint_id: str,
    principal: Principal = Depends(get_current_principal),
    service: ComplaintService = Depends(get_complaint_service),
    analytics: AnalyticsService = Depends(get_analytics_service),
):
    complaint = await service.get_complaint(complaint_id)
    return ComplaintResponse.from_domain(complaint, analytics.now(), analytics.policy)


@complaints_router.post(
    "/{complaint_id}/assign",
    response_model=ComplaintResponse,
    summary="Assign a technician",
    description="""
    Admin only. The technician's specialization must match the
    complaint's category. The complaint moves to `in-progress` and an
    "Assigned to <name>" update is recorded.
    """,
    responses={
        400: {"description": "Specialization mismatch"},
        403: {"description": "Caller is not an admin"},
        404: {"description": "Complaint or technician not found"},
        409: {"description": "Complaint already resolved"}
    }
)
async def assign_technician(
    complaint_id: str,
    payload: AssignTechnicianDTO,
    principal: Principal = Depends(get_current_principal),
    service: ComplaintService = Depends(get_complaint_service),
    analytics: AnalyticsService = Depends(get_analytics_service),
):
    complaint = await service.assign_technician(principal, complaint_id, payload.technician_id)
    return ComplaintResponse.from_domain(complaint, analytics.now(), analytics.policy)


@complaints_router.post(
    "/{complaint_id}/updates",
    response_model=ComplaintResponse,
    summary="Post a status update",
    description="""
    Admins, or the assigned technician. `status` is `in-progress` or
    `resolved`; resolving stamps `resolvedAt`.
    """,
    responses={
        403: {"description": "Caller may not update this complaint"},
        404: {"description": "Complaint not found"},
        409: {"description": "Complaint already resolved or status regression"}
    }
)
async def record_status_update(
    complaint_id: str,
    payload: StatusUpdateDTO,
    principal: Principal = Depends(get_current_principal),
    service: ComplaintService = Depends(get_complaint_service),
    analytics: AnalyticsService = Depends(get_analytics_service),
):
    complaint = await service.record_status_update(
        principal, complaint_id, payload.status, payload.message
    )
    return ComplaintResponse.from_domain(complaint, analytics.now(), analytics.policy)


@complaints_router.get(
    "/{complaint_id}/technicians",
    response_model=TechnicianOptionsResponse,
    summary="Technicians for a complaint",
    description="Admin only. Technicians split by whether they match the complaint's category."
)
async def technicians_for_complaint(
    complaint_id: str,
    principal: Principal = Depends(get_current_principal),
    service: ComplaintService = Depends(get_complaint_service),
    technicians: TechnicianService = Depends(get_technician_service),
):
    complaint = await service.get_complaint(complaint_id)
    matching, others = await technicians.technicians_for(principal, complaint)
    return TechnicianOptionsResponse(
        matching=[TechnicianResponse.from_domain(t) for t in matching],
        others=[TechnicianResponse.from_domain(t) for t in others],
    )


# ========== Technician routes ==========

@technicians_router.post(
    "",
    response_model=TechnicianResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Add a technician",
    description="Admin only. Technicians cannot register themselves.",
    responses={
        400: {"description": "Invalid input or duplicate email"},
        403: {"description": "Caller is not an admin"}
    }
)
async def add_technician(
    payload: TechnicianCreateDTO,
    principal: Principal = Depends(get_current_principal),
    technicians: TechnicianService = Depends(get_technician_service),
):
    technician = await technicians.add_technician(principal, payload)
    return TechnicianResponse.from_domain(technician)


@technicians_router.get(
    "",
    response_model=List[TechnicianResponse],
    summary="List technicians",
    description="Admin only."
)
async def list_technicians(
    principal: Principal = Depends(get_current_principal),
    technicians: TechnicianService = Depends(get_technician_service),
):
    return [TechnicianResponse.from_domain(t) for t in await technicians.list_technicians(principal)]


@technicians_router.get(
    "/{technician_id}",
    response_model=TechnicianResponse,
    summary="Get a technician",
    responses={404: {"description": "Technician not found"}}
)
async def get_technician(
    technician_id: str,
    principal: Principal = Depends(get_current_principal),
    technicians: TechnicianService = Depends(get_technician_service),
):
    return TechnicianResponse.from_domain(await technicians.get_technician(technician_id))
