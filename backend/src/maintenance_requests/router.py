"""Maintenance request API endpoints

Provides:
- POST /requests: file a request (multipart, optional photo)
- GET /requests: list visible requests, newest first
- GET /requests/{id}: one request
- PATCH /requests/{id}/status: manager status change
- POST /requests/{id}/cancel: submitter withdraws a request
- POST /requests/{id}/rating: submitter rates completed work
"""

import logging
from typing import Annotated, List, Optional

from fastapi import APIRouter, Depends, File, Form, HTTPException, Query, UploadFile, status

from auth.dependencies import CurrentUser, get_current_user
from config import get_settings
from dependencies import get_request_service
from domain.errors import ImageStoreError
from domain.images import is_supported_image_type, sanitize_filename, validate_image_size
from domain.maintenance import RequestStatus
from .schemas import MaintenanceRequestResponse, RatingSubmission, StatusUpdate
from .service import (
    ImageUpload,
    InvalidTransitionError,
    MaintenanceRequestService,
    PermissionDeniedError,
    RatingNotAllowedError,
    RequestNotFoundError,
)

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/requests", tags=["Requests"])


def _translate(e: Exception) -> HTTPException:
    """Map service errors onto HTTP errors."""
    if isinstance(e, RequestNotFoundError):
        return HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Request not found")
    if isinstance(e, PermissionDeniedError):
        return HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail=str(e))
    if isinstance(e, (InvalidTransitionError, RatingNotAllowedError)):
        return HTTPException(status_code=status.HTTP_409_CONFLICT, detail=str(e))
    return HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail="Internal server error")


@router.post("", response_model=MaintenanceRequestResponse, status_code=status.HTTP_201_CREATED)
async def create_request(
    current_user: Annotated[CurrentUser, Depends(get_current_user)],
    service: Annotated[MaintenanceRequestService, Depends(get_request_service)],
    problem_type: Annotated[str, Form(alias="problemType")],
    description: Annotated[str, Form()],
    image: Annotated[Optional[UploadFile], File()] = None,
):
    """File a maintenance request for the caller's branch

    Accepts multipart/form-data with `problemType`, `description` and an
    optional `image` (JPEG, PNG, GIF, WebP or BMP, at most MAX_IMAGE_BYTES).

    Raises:
        HTTPException 422: Unknown problem type, empty description or invalid image
        HTTPException 502: Image host rejected the upload

    Example:
        curl -X POST https://desk.example/api/v1/requests \\
             -H "Authorization: Bearer $TOKEN" \\
             -F "problemType=Plumbing" \\
             -F "description=Leaking sink in staff kitchen" \\
             -F "image=@leak.jpg"
    """
    upload = None
    if image is not None and image.filename:
        if not is_supported_image_type(image.content_type):
            raise HTTPException(
                status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
                detail=f"Unsupported image type: {image.content_type}",
            )

        content = await image.read()
        is_valid, error_msg = validate_image_size(len(content), get_settings().MAX_IMAGE_BYTES)
        if not is_valid:
            raise HTTPException(status_code=status.HTTP_422_UNPROCESSABLE_ENTITY, detail=error_msg)

        upload = ImageUpload(
            content=content,
            filename=sanitize_filename(image.filename),
            mime_type=image.content_type,
        )

    try:
        request = await service.create_request(current_user, problem_type, description, upload)
    except ValueError as e:
        raise HTTPException(status_code=status.HTTP_422_UNPROCESSABLE_ENTITY, detail=str(e))
    except ImageStoreError as e:
        logger.error(
            "Image upload failed",
            extra={"branch_code": current_user.branch_code, "error": str(e)}
        )
        raise HTTPException(status_code=status.HTTP_502_BAD_GATEWAY, detail="Image upload failed")

    return MaintenanceRequestResponse.from_stored(request)


@router.get("", response_model=List[MaintenanceRequestResponse])
async def list_requests(
    current_user: Annotated[CurrentUser, Depends(get_current_user)],
    service: Annotated[MaintenanceRequestService, Depends(get_request_service)],
    status_filter: Annotated[Optional[RequestStatus], Query(alias="status")] = None,
    limit: Annotated[Optional[int], Query(ge=1, le=500)] = None,
):
    """List requests visible to the caller, newest first."""
    requests = await service.list_requests(current_user, status=status_filter, limit=limit)
    return [MaintenanceRequestResponse.from_stored(r) for r in requests]


@router.get("/{request_id}", response_model=MaintenanceRequestResponse)
async def get_request(
    request_id: str,
    current_user: Annotated[CurrentUser, Depends(get_current_user)],
    service: Annotated[MaintenanceRequestService, Depends(get_request_service)],
):
    try:
        request = await service.get_request(current_user, request_id)
    except RequestNotFoundError as e:
        raise _translate(e)
    return MaintenanceRequestResponse.from_stored(request)


@router.patch("/{request_id}/status", response_model=MaintenanceRequestResponse)
async def update_request_status(
    request_id: str,
    body: StatusUpdate,
    current_user: Annotated[CurrentUser, Depends(get_current_user)],
    service: Annotated[MaintenanceRequestService, Depends(get_request_service)],
):
    """Change a request's status (managers only) and notify the branch."""
    try:
        request = await service.update_status(
            current_user, request_id, body.status, body.manager_notes
        )
    except (RequestNotFoundError, PermissionDeniedError, InvalidTransitionError) as e:
        raise _translate(e)
    return MaintenanceRequestResponse.from_stored(request)


@router.post("/{request_id}/cancel", response_model=MaintenanceRequestResponse)
async def cancel_request(
    request_id: str,
    current_user: Annotated[CurrentUser, Depends(get_current_user)],
    service: Annotated[MaintenanceRequestService, Depends(get_request_service)],
):
    """Withdraw a request that is still under review or approved."""
    try:
        request = await service.cancel_request(current_user, request_id)
    except (RequestNotFoundError, PermissionDeniedError, InvalidTransitionError) as e:
        raise _translate(e)
    return MaintenanceRequestResponse.from_stored(request)


@router.post("/{request_id}/rating", response_model=MaintenanceRequestResponse)
async def rate_request(
    request_id: str,
    body: RatingSubmission,
    current_user: Annotated[CurrentUser, Depends(get_current_user)],
    service: Annotated[MaintenanceRequestService, Depends(get_request_service)],
):
    """Rate completed work (1-5 stars, once)."""
    try:
        request = await service.rate_request(
            current_user, request_id, body.rating, body.feedback
        )
    except (RequestNotFoundError, PermissionDeniedError, RatingNotAllowedError) as e:
        raise _translate(e)
    return MaintenanceRequestResponse.from_stored(request)
