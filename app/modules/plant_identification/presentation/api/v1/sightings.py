# 📄 File: app/modules/plant_identification/presentation/api/v1/sightings.py
# 🧭 Purpose (Layman Explanation):
# The web endpoints for a user's plant sightings: upload a photo of a plant
# with where it was seen, ask what plant it is, and view, edit or delete it.
# 🧪 Purpose (Technical Summary):
# FastAPI router for sightings. Creation is multipart (photo bytes or a photo
# URL) and is gated by the caller's daily identification allowance.
# Identification endpoints return discriminated results with HTTP 200 and are
# rate limited with slowapi. Domain exceptions are rendered by the global
# exception handler.
# 🔗 Dependencies:
# FastAPI, slowapi, application commands/queries/DTOs, presentation dependencies
# 🔄 Connected Modules / Calls From:
# presentation.api.v1.__init__ (router inclusion), app.api.v1.router

"""
Sightings API Endpoints

- POST   /sightings                              create (multipart photo or photo_url)
- GET    /sightings                              list own sightings, newest first
- GET    /sightings/{sighting_id}                one sighting with plant + photo URL
- PATCH  /sightings/{sighting_id}                edit name/notes
- DELETE /sightings/{sighting_id}                delete (tour stops go with it)
- POST   /sightings/{sighting_id}/identify/name  identify from a typed name
- POST   /sightings/{sighting_id}/identify/photo identify from the photo
"""

from typing import Optional

from fastapi import APIRouter, Depends, File, Form, Query, Request, Response, UploadFile, status

from app.modules.plant_identification.application.commands import (
    CreateSightingCommand,
    DeleteSightingCommand,
)
from app.modules.plant_identification.application.dto import (
    IdentificationResultDTO,
    SightingDTO,
    SightingListDTO,
)
from app.modules.plant_identification.application.handlers import (
    CreateSightingHandler,
    DeleteSightingHandler,
    EditSightingHandler,
    GetSightingHandler,
    IdentifySightingByNameHandler,
    IdentifySightingByPhotoHandler,
    ListSightingsHandler,
)
from app.modules.plant_identification.application.queries import GetSightingQuery, ListSightingsQuery
from app.modules.plant_identification.presentation.api.schemas import (
    EditSightingRequest,
    IdentifyByNameRequest,
    IdentifyByPhotoRequest,
)
from app.modules.plant_identification.presentation.dependencies import (
    get_create_sighting_handler,
    get_current_user_id,
    get_delete_sighting_handler,
    get_edit_sighting_handler,
    get_identify_by_name_handler,
    get_identify_by_photo_handler,
    get_list_sightings_handler,
    get_sighting_handler,
    identification_rate_limit,
    limiter,
)
from app.shared.config.settings import Settings, get_settings
from app.shared.core.exceptions import FileTooLargeError
from app.shared.utils.logging import get_logger

logger = get_logger(__name__)

sightings_router = APIRouter()

_BYTES_PER_MB = 1024 * 1024


@sightings_router.post(
    "",
    response_model=SightingDTO,
    status_code=status.HTTP_201_CREATED,
    summary="Record a sighting",
    responses={
        401: {"description": "Missing caller identity"},
        403: {"description": "Daily identification allowance used up"},
        413: {"description": "Photo too large"},
        415: {"description": "Unsupported photo type"},
        422: {"description": "Invalid coordinates or photo source"},
    },
)
async def create_sighting(
    latitude: float = Form(...),
    longitude: float = Form(...),
    address: Optional[str] = Form(None),
    user_provided_name: Optional[str] = Form(None),
    private_notes: Optional[str] = Form(None),
    photo_url: Optional[str] = Form(None),
    photo: Optional[UploadFile] = File(None),
    user_id: str = Depends(get_current_user_id),
    handler: CreateSightingHandler = Depends(get_create_sighting_handler),
    settings: Settings = Depends(get_settings),
) -> SightingDTO:
    """
    Create a pending sighting from an uploaded photo or an absolute photo URL.

    Each sighting counts against the caller's daily identification allowance.
    """
    photo_data = None
    if photo is not None:
        max_bytes = settings.MAX_PHOTO_SIZE_MB * _BYTES_PER_MB
        photo_data = await photo.read(max_bytes + 1)
        if len(photo_data) > max_bytes:
            raise FileTooLargeError(
                settings.MAX_PHOTO_SIZE_MB, len(photo_data) / _BYTES_PER_MB, photo.filename
            )

    command = CreateSightingCommand(
        user_id=user_id,
        latitude=latitude,
        longitude=longitude,
        address=address,
        user_provided_name=user_provided_name or None,
        private_notes=private_notes or None,
        photo_data=photo_data or None,
        photo_filename=photo.filename if photo is not None else None,
        photo_content_type=photo.content_type if photo is not None else None,
        photo_url=photo_url or None,
    )
    return await handler.handle(command)


@sightings_router.get("", response_model=SightingListDTO, summary="List my sightings")
async def list_sightings(
    limit: int = Query(50, ge=1, le=200),
    offset: int = Query(0, ge=0),
    user_id: str = Depends(get_current_user_id),
    handler: ListSightingsHandler = Depends(get_list_sightings_handler),
) -> SightingListDTO:
    return await handler.handle(ListSightingsQuery(user_id=user_id, limit=limit, offset=offset))


@sightings_router.get(
    "/{sighting_id}",
    response_model=SightingDTO,
    summary="Get a sighting",
    responses={403: {"description": "Not your sighting"}, 404: {"description": "Sighting not found"}},
)
async def get_sighting(
    sighting_id: str,
    user_id: str = Depends(get_current_user_id),
    handler: GetSightingHandler = Depends(get_sighting_handler),
) -> SightingDTO:
    return await handler.handle(GetSightingQuery(user_id=user_id, sighting_id=sighting_id))


@sightings_router.patch(
    "/{sighting_id}",
    response_model=SightingDTO,
    summary="Edit a sighting's name or notes",
    responses={403: {"description": "Not your sighting"}, 404: {"description": "Sighting not found"}},
)
async def edit_sighting(
    sighting_id: str,
    body: EditSightingRequest,
    user_id: str = Depends(get_current_user_id),
    handler: EditSightingHandler = Depends(get_edit_sighting_handler),
) -> SightingDTO:
    return await handler.handle(body.to_command(user_id, sighting_id))


@sightings_router.delete(
    "/{sighting_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Delete a sighting",
    responses={403: {"description": "Not your sighting"}, 404: {"description": "Sighting not found"}},
)
async def delete_sighting(
    sighting_id: str,
    user_id: str = Depends(get_current_user_id),
    handler: DeleteSightingHandler = Depends(get_delete_sighting_handler),
) -> Response:
    await handler.handle(DeleteSightingCommand(user_id=user_id, sighting_id=sighting_id))
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@sightings_router.post(
    "/{sighting_id}/identify/name",
    response_model=IdentificationResultDTO,
    summary="Identify a sighting from a typed name",
    responses={
        403: {"description": "Not your sighting"},
        404: {"description": "Sighting not found"},
        429: {"description": "Too many identification requests"},
    },
)
@limiter.limit(identification_rate_limit)
async def identify_by_name(
    request: Request,
    sighting_id: str,
    body: IdentifyByNameRequest,
    user_id: str = Depends(get_current_user_id),
    handler: IdentifySightingByNameHandler = Depends(get_identify_by_name_handler),
) -> IdentificationResultDTO:
    """
    Resolve the sighting from a name.

    ``success: false`` with ``suggestions`` means the name needs clarification;
    resubmit with one of them.
    """
    return await handler.handle(body.to_command(user_id, sighting_id))


@sightings_router.post(
    "/{sighting_id}/identify/photo",
    response_model=IdentificationResultDTO,
    summary="Identify a sighting from its photo",
    responses={
        403: {"description": "Not your sighting"},
        404: {"description": "Sighting not found"},
        429: {"description": "Too many identification requests"},
    },
)
@limiter.limit(identification_rate_limit)
async def identify_by_photo(
    request: Request,
    sighting_id: str,
    body: Optional[IdentifyByPhotoRequest] = None,
    user_id: str = Depends(get_current_user_id),
    handler: IdentifySightingByPhotoHandler = Depends(get_identify_by_photo_handler),
) -> IdentificationResultDTO:
    body = body or IdentifyByPhotoRequest()
    return await handler.handle(body.to_command(user_id, sighting_id))
