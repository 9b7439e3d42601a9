import asyncio
from typing import Optional

from fastapi import APIRouter, Depends, Form, Query, Request
from fastapi.responses import HTMLResponse, RedirectResponse
from dependency_injector.wiring import inject, Provide

from app.app_containers import ApplicationContainer
from app.core.logger import logger
from app.utils.html_renderer import ConsoleRenderer
from app.v1_0.schemas import PostOut, PreferencesOut, UserOut, UserStatus
from app.v1_0.services import UserActionsService, parse_page_param

router = APIRouter(prefix="/users", tags=["Users"])

SEE_OTHER = 303


def _safe_next(target: Optional[str], default: str) -> str:
    """Only follow same-site relative targets."""
    if target and target.startswith("/") and not target.startswith("//"):
        return target
    return default


@router.get("", response_class=HTMLResponse, summary="Paginated user listing")
@inject
async def users_page(
    page: Optional[str] = Query(None, description="0-based page index"),
    service: UserActionsService = Depends(Provide[ApplicationContainer.api_container.user_actions_service]),
    renderer: ConsoleRenderer = Depends(Provide[ApplicationContainer.api_container.console_renderer]),
) -> HTMLResponse:
    data = await service.get_users(page)
    users = [UserOut.model_validate(u) for u in data.users]
    return HTMLResponse(renderer.users_page(data, users))


@router.post("/{user_id}/delete-from-home", summary="Delete a user from the listing")
@inject
async def delete_user_from_home(
    user_id: str,
    page: Optional[str] = Form(None),
    service: UserActionsService = Depends(Provide[ApplicationContainer.api_container.user_actions_service]),
) -> RedirectResponse:
    logger.warning("[UsersRouter] delete_from_home id=%s", user_id)
    await service.delete_user_from_home(user_id)
    return RedirectResponse(f"/users?page={parse_page_param(page)}", status_code=SEE_OTHER)


@router.post("/{user_id}/toggle-status", summary="Flip a user between ACTIVE and INACTIVE")
@inject
async def toggle_user_status(
    user_id: str,
    current_status: str = Form(""),
    next: Optional[str] = Form(None),
    service: UserActionsService = Depends(Provide[ApplicationContainer.api_container.user_actions_service]),
) -> RedirectResponse:
    await service.toggle_user_status(user_id, UserStatus(current_status).toggled)
    return RedirectResponse(_safe_next(next, "/users?page=0"), status_code=SEE_OTHER)


@router.get("/add", response_class=HTMLResponse, summary="Add-user form")
@inject
async def add_user_page(
    success: bool = Query(False),
    error: Optional[str] = Query(None),
    renderer: ConsoleRenderer = Depends(Provide[ApplicationContainer.api_container.console_renderer]),
) -> HTMLResponse:
    return HTMLResponse(renderer.add_user_page(success=success, error=error))


@router.post("/add", summary="Submit the add-user form")
@inject
async def add_user(
    request: Request,
    service: UserActionsService = Depends(Provide[ApplicationContainer.api_container.user_actions_service]),
) -> RedirectResponse:
    form = await request.form()
    logger.info("[UsersRouter] add username=%s roles=%s", form.get("username"), form.getlist("roles"))
    target = await service.add_user_action(form)
    return RedirectResponse(target.location, status_code=SEE_OTHER)


@router.get("/{user_id}", response_class=HTMLResponse, summary="User detail page")
@inject
async def user_detail_page(
    user_id: str,
    service: UserActionsService = Depends(Provide[ApplicationContainer.api_container.user_actions_service]),
    renderer: ConsoleRenderer = Depends(Provide[ApplicationContainer.api_container.console_renderer]),
) -> HTMLResponse:
    user, prefs, posts = await asyncio.gather(
        service.get_user_by_id(user_id),
        service.get_user_preferences(user_id),
        service.get_user_posts(user_id),
    )
    if user is None:
        return HTMLResponse(renderer.not_found_page(), status_code=404)

    return HTMLResponse(
        renderer.user_detail_page(
            UserOut.model_validate(user),
            PreferencesOut.model_validate(prefs) if prefs is not None else None,
            [PostOut.model_validate(p) for p in posts],
        )
    )


@router.post("/{user_id}/delete", summary="Delete a user and return to the listing")
@inject
async def delete_user(
    user_id: str,
    service: UserActionsService = Depends(Provide[ApplicationContainer.api_container.user_actions_service]),
) -> RedirectResponse:
    logger.warning("[UsersRouter] delete id=%s", user_id)
    target = await service.delete_user(user_id)
    return RedirectResponse(target.location, status_code=SEE_OTHER)


@router.post("/{user_id}/posts", summary="Create a post for the user")
@inject
async def create_user_post(
    user_id: str,
    title: str = Form(""),
    content: str = Form(""),
    service: UserActionsService = Depends(Provide[ApplicationContainer.api_container.user_actions_service]),
) -> RedirectResponse:
    if title and content:
        await service.create_user_post(user_id, title, content)
    return RedirectResponse(f"/users/{user_id}", status_code=SEE_OTHER)


@router.post("/{user_id}/preferences/default", summary="Create default preferences")
@inject
async def create_default_preferences(
    user_id: str,
    service: UserActionsService = Depends(Provide[ApplicationContainer.api_container.user_actions_service]),
) -> RedirectResponse:
    await service.create_default_preferences(user_id)
    return RedirectResponse(f"/users/{user_id}", status_code=SEE_OTHER)
