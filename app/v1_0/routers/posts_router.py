from typing import Optional
from urllib.parse import quote

from fastapi import APIRouter, Depends, Form
from fastapi.responses import RedirectResponse
from dependency_injector.wiring import inject, Provide

from app.app_containers import ApplicationContainer
from app.core.logger import logger
from app.v1_0.services import UserActionsService

router = APIRouter(prefix="/posts", tags=["Posts"])


@router.post("/{post_id}/delete", summary="Delete a post and return to its owner")
@inject
async def soft_delete_post(
    post_id: str,
    user_id: Optional[str] = Form(None),
    service: UserActionsService = Depends(Provide[ApplicationContainer.api_container.user_actions_service]),
) -> RedirectResponse:
    logger.warning("[PostsRouter] delete id=%s owner=%s", post_id, user_id)
    await service.soft_delete_post(post_id, user_id=user_id)
    target = f"/users/{quote(user_id, safe='')}" if user_id else "/users?page=0"
    return RedirectResponse(target, status_code=303)
