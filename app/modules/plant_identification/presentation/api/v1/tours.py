# 📄 File: app/modules/plant_identification/presentation/api/v1/tours.py
# 🧭 Purpose (Layman Explanation):
# The web endpoints for plant tours: create, edit and delete a tour, add,
# annotate and remove its stops, and browse tours.
# 🧪 Purpose (Technical Summary):
# FastAPI router for tours. Creation and visibility changes are gated by the
# plan's private/public tour allowance; stops are appended in order and the
# rest move up when one is removed.
# 🔗 Dependencies:
# FastAPI, application handlers/DTOs, presentation dependencies
# 🔄 Connected Modules / Calls From:
# presentation.api.v1.__init__

"""
Tours API Endpoints

- POST   /tours                            create (plan-gated)
- GET    /tours                            list own tours
- GET    /tours/public                     public tours of every user
- GET    /tours/{tour_id}                  tour with ordered stops
- PATCH  /tours/{tour_id}                  edit (publishing is plan-gated)
- DELETE /tours/{tour_id}                  delete with its stops
- POST   /tours/{tour_id}/stops            append a sighting
- PATCH  /tours/{tour_id}/stops/{stop_id}  edit a stop's title or notes
- DELETE /tours/{tour_id}/stops/{stop_id}  remove a stop and renumber the rest
"""

from typing import List

from fastapi import APIRouter, Depends, Query, Response, status

from app.modules.plant_identification.application.commands import (
    DeleteTourCommand,
    RemoveTourStopCommand,
)
from app.modules.plant_identification.application.dto import TourDetailDTO, TourDTO, TourStopDTO
from app.modules.plant_identification.application.handlers import (
    AddTourStopHandler,
    CreateTourHandler,
    DeleteTourHandler,
    GetTourHandler,
    ListPublicToursHandler,
    ListToursHandler,
    RemoveTourStopHandler,
    UpdateTourHandler,
    UpdateTourStopHandler,
)
from app.modules.plant_identification.application.queries import (
    GetTourQuery,
    ListPublicToursQuery,
    ListToursQuery,
)
from app.modules.plant_identification.presentation.api.schemas import (
    AddTourStopRequest,
    CreateTourRequest,
    UpdateTourRequest,
    UpdateTourStopRequest,
)
from app.modules.plant_identification.presentation.dependencies import (
    get_add_tour_stop_handler,
    get_create_tour_handler,
    get_current_user_id,
    get_delete_tour_handler,
    get_list_public_tours_handler,
    get_list_tours_handler,
    get_remove_tour_stop_handler,
    get_tour_handler,
    get_update_tour_handler,
    get_update_tour_stop_handler,
)

tours_router = APIRouter()


@tours_router.post(
    "",
    response_model=TourDTO,
    status_code=status.HTTP_201_CREATED,
    summary="Create a tour",
    responses={403: {"description": "Plan does not allow another tour of this kind"}},
)
async def create_tour(
    body: CreateTourRequest,
    user_id: str = Depends(get_current_user_id),
    handler: CreateTourHandler = Depends(get_create_tour_handler),
) -> TourDTO:
    return await handler.handle(body.to_command(user_id))


@tours_router.get("", response_model=List[TourDTO], summary="List my tours")
async def list_tours(
    user_id: str = Depends(get_current_user_id),
    handler: ListToursHandler = Depends(get_list_tours_handler),
) -> List[TourDTO]:
    return await handler.handle(ListToursQuery(user_id=user_id))


@tours_router.get("/public", response_model=List[TourDTO], summary="Browse public tours")
async def list_public_tours(
    limit: int = Query(50, ge=1, le=100),
    offset: int = Query(0, ge=0),
    handler: ListPublicToursHandler = Depends(get_list_public_tours_handler),
) -> List[TourDTO]:
    return await handler.handle(ListPublicToursQuery(limit=limit, offset=offset))


@tours_router.get(
    "/{tour_id}",
    response_model=TourDetailDTO,
    summary="Get a tour with its stops",
    responses={403: {"description": "Private tour"}, 404: {"description": "Tour not found"}},
)
async def get_tour(
    tour_id: str,
    user_id: str = Depends(get_current_user_id),
    handler: GetTourHandler = Depends(get_tour_handler),
) -> TourDetailDTO:
    return await handler.handle(GetTourQuery(user_id=user_id, tour_id=tour_id))


@tours_router.patch(
    "/{tour_id}",
    response_model=TourDTO,
    summary="Edit a tour",
    responses={
        403: {"description": "Not your tour, or the plan does not allow the new visibility"},
        404: {"description": "Tour not found"},
    },
)
async def update_tour(
    tour_id: str,
    body: UpdateTourRequest,
    user_id: str = Depends(get_current_user_id),
    handler: UpdateTourHandler = Depends(get_update_tour_handler),
) -> TourDTO:
    return await handler.handle(body.to_command(user_id, tour_id))


@tours_router.delete(
    "/{tour_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Delete a tour",
    responses={403: {"description": "Not your tour"}, 404: {"description": "Tour not found"}},
)
async def delete_tour(
    tour_id: str,
    user_id: str = Depends(get_current_user_id),
    handler: DeleteTourHandler = Depends(get_delete_tour_handler),
) -> Response:
    await handler.handle(DeleteTourCommand(user_id=user_id, tour_id=tour_id))
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@tours_router.post(
    "/{tour_id}/stops",
    response_model=TourStopDTO,
    status_code=status.HTTP_201_CREATED,
    summary="Append a sighting to a tour",
    responses={403: {"description": "Not your tour or sighting"}, 404: {"description": "Tour or sighting not found"}},
)
async def add_tour_stop(
    tour_id: str,
    body: AddTourStopRequest,
    user_id: str = Depends(get_current_user_id),
    handler: AddTourStopHandler = Depends(get_add_tour_stop_handler),
) -> TourStopDTO:
    return await handler.handle(body.to_command(user_id, tour_id))


@tours_router.patch(
    "/{tour_id}/stops/{stop_id}",
    response_model=TourStopDTO,
    summary="Edit a stop's title or notes",
    responses={403: {"description": "Not your tour"}, 404: {"description": "Tour or stop not found"}},
)
async def update_tour_stop(
    tour_id: str,
    stop_id: str,
    body: UpdateTourStopRequest,
    user_id: str = Depends(get_current_user_id),
    handler: UpdateTourStopHandler = Depends(get_update_tour_stop_handler),
) -> TourStopDTO:
    return await handler.handle(body.to_command(user_id, tour_id, stop_id))


@tours_router.delete(
    "/{tour_id}/stops/{stop_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Remove a stop from a tour",
    responses={403: {"description": "Not your tour"}, 404: {"description": "Tour or stop not found"}},
)
async def remove_tour_stop(
    tour_id: str,
    stop_id: str,
    user_id: str = Depends(get_current_user_id),
    handler: RemoveTourStopHandler = Depends(get_remove_tour_stop_handler),
) -> Response:
    await handler.handle(RemoveTourStopCommand(user_id=user_id, tour_id=tour_id, stop_id=stop_id))
    return Response(status_code=status.HTTP_204_NO_CONTENT)
