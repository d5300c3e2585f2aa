"""Stateless learning-resource lookup."""

from fastapi import APIRouter

from homework_helper.api.deps import CurrentUser, Generator
from homework_helper.schemas.resources import ResourcesRequest, ResourcesResponse

router = APIRouter(prefix="/resources", tags=["resources"])


@router.post("", response_model=ResourcesResponse)
async def find_resources(request: ResourcesRequest, user: CurrentUser, generator: Generator):
    """
    Suggest learning resources for any problem text.

    Nothing is persisted. Falls back to keyword-based resources when the
    model cannot help, so this never fails on valid input.
    """
    return ResourcesResponse(resources=await generator.generate_resources(request.content))
