from typing import Any, Dict, List, Mapping, Optional, Union
from urllib.parse import quote

import httpx

from app.core.logger import logger
from app.core.revalidation import ResponseCache, ViewInvalidator
from app.v1_0.entities import AddUserResult, Redirect, UsersPageDTO, USERS_PAGE_SIZE
from app.v1_0.schemas import PostCreate, PreferencesUpsert, UserCreate, UserStatus, UserStatusUpdate

JSON_HEADERS = {"Content-Type": "application/json"}
USERS_VIEW = "/users"
ADD_USER_VIEW = "/users/add"


def parse_page_param(page: Union[str, int, None]) -> int:
    """
    Coerce a `?page=` value into a page index.

    Absent, blank, non-numeric and negative values all mean the first page.
    """
    if page is None or isinstance(page, bool):
        return 0
    if isinstance(page, int):
        return max(page, 0)
    try:
        value = int(str(page).strip())
    except ValueError:
        return 0
    return max(value, 0)


def _seg(value: Any) -> str:
    """Percent-encode an id as a single URL path segment."""
    return quote(str(value), safe="")


def _coalesce(value: Any, default: Any) -> Any:
    return default if value is None else value


def _read_user_form(form: Mapping[str, Any]) -> UserCreate:
    """Build the create-user body from a multi-value form (or a plain dict)."""
    getlist = getattr(form, "getlist", None)
    if callable(getlist):
        roles = [str(r) for r in getlist("roles")]
    else:
        raw = form.get("roles") or []
        roles = [raw] if isinstance(raw, str) else [str(r) for r in raw]
    return UserCreate(
        username=form.get("username"),
        email=form.get("email"),
        name=form.get("name"),
        roles=roles,
    )


class UserActionsService:
    """
    Proxy over the backend's `/users` and `/posts` REST resources.

    Reads degrade to `None` / `[]` so pages can render partial data; writes
    raise so the caller can react, except `add_user`, which reports its
    outcome as an `AddUserResult`. Every successful mutation revalidates the
    view paths that render the affected data.
    """

    def __init__(
        self,
        base_url: str,
        revalidator: ViewInvalidator,
        cache: ResponseCache,
        *,
        api_prefix: str = "/api/v1",
        timeout: float = 15.0,
        list_ttl: float = 30.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        self.base = f"{base_url.rstrip('/')}{api_prefix}"
        self.revalidator = revalidator
        self.cache = cache
        self.timeout = timeout
        self.list_ttl = list_ttl
        self.transport = transport

    def _client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(timeout=self.timeout, transport=self.transport)

    # ---- reads ---------------------------------------------------------------

    async def get_all_users(self) -> List[Dict[str, Any]]:
        """
        Fetch every user, unpaged. Always hits the backend.

        Raises:
            RuntimeError: If the backend responds non-2xx.
        """
        async with self._client() as client:
            r = await client.get(f"{self.base}/users")
        if not r.is_success:
            raise RuntimeError("Failed to fetch all users")
        return r.json()

    async def get_users(self, page: Union[str, int, None] = None) -> UsersPageDTO:
        """
        Fetch one page of users and normalize the backend envelope.

        Successful responses are reused for `list_ttl` seconds, or until
        the `/users` view is revalidated.

        Args:
            page: Raw `?page=` value; see `parse_page_param`.

        Returns:
            UsersPageDTO with missing envelope fields defaulted.

        Raises:
            RuntimeError: If the backend responds non-2xx.
        """
        current = parse_page_param(page)
        size = USERS_PAGE_SIZE
        url = f"{self.base}/users?page={current}&size={size}"

        data = self.cache.get(url)
        if data is None:
            generation = self.cache.generation(USERS_VIEW)
            async with self._client() as client:
                r = await client.get(url)
            if not r.is_success:
                logger.error("[UserActions] Failed to fetch users: %s %s", r.status_code, r.reason_phrase)
                raise RuntimeError("Failed to fetch users")
            data = r.json()
            self.cache.put(url, data, path=USERS_VIEW, ttl=self.list_ttl, generation=generation)

        payload: Dict[str, Any] = data if isinstance(data, dict) else {}
        total_pages = _coalesce(payload.get("totalPages"), 1)
        return UsersPageDTO(
            users=payload.get("content") or [],
            total_pages=total_pages,
            is_first=_coalesce(payload.get("first"), current == 0),
            is_last=_coalesce(payload.get("last"), current + 1 >= total_pages),
            page_number=_coalesce(payload.get("number"), current),
            size=size,
        )

    async def get_user_by_id(self, user_id: str) -> Optional[Dict[str, Any]]:
        """Return the user payload, or None when missing or unreachable."""
        try:
            async with self._client() as client:
                r = await client.get(f"{self.base}/users/{_seg(user_id)}")
            if not r.is_success:
                return None
            return r.json()
        except (httpx.HTTPError, ValueError) as e:
            logger.error("[UserActions] Failed to fetch user info id=%s err=%s", user_id, e)
            return None

    async def get_user_preferences(self, user_id: str) -> Optional[Dict[str, Any]]:
        """
        Return the user's preferences, or None.

        A 2xx payload carrying an `error` field also means "no preferences".
        """
        try:
            async with self._client() as client:
                r = await client.get(f"{self.base}/users/{_seg(user_id)}/preferences")
            if not r.is_success:
                return None
            data = r.json()
        except (httpx.HTTPError, ValueError) as e:
            logger.warning("[UserActions] No preferences found id=%s err=%s", user_id, e)
            return None
        if isinstance(data, dict) and data.get("error"):
            return None
        return data

    async def get_user_posts(self, user_id: str) -> List[Dict[str, Any]]:
        """Return the user's posts; an empty list on any failure."""
        try:
            async with self._client() as client:
                r = await client.get(f"{self.base}/users/{_seg(user_id)}/posts")
            if not r.is_success:
                return []
            return r.json() or []
        except (httpx.HTTPError, ValueError) as e:
            logger.warning("[UserActions] No posts found id=%s err=%s", user_id, e)
            return []

    # ---- user mutations ------------------------------------------------------

    async def add_user(self, form: Mapping[str, Any]) -> AddUserResult:
        """
        Create a user from a submitted form. Never raises.

        Args:
            form: Multi-value form with `username`, `email`, `name` and
                zero or more `roles`.

        Returns:
            AddUserResult(success=True), or success=False with a generic
            error message when the backend rejects the request or is
            unreachable.
        """
        try:
            body = _read_user_form(form)
            async with self._client() as client:
                r = await client.post(
                    f"{self.base}/users",
                    headers=JSON_HEADERS,
                    json=body.model_dump(mode="json"),
                )
            if not r.is_success:
                raise RuntimeError(f"Failed to add user ({r.status_code})")

            await self.revalidator.revalidate_path(USERS_VIEW)
            return AddUserResult(success=True)
        except Exception as e:
            logger.error("[UserActions] Error adding user: %s", e)
            return AddUserResult(success=False, error="Failed to add user")

    async def add_user_action(self, form: Mapping[str, Any]) -> Redirect:
        """Run `add_user` and point the browser back at the form with the outcome."""
        result = await self.add_user(form)
        if result.success:
            return Redirect(f"{ADD_USER_VIEW}?success=true")
        message = quote(result.error or "Unknown error", safe="!~*'()")
        return Redirect(f"{ADD_USER_VIEW}?error={message}")

    async def toggle_user_status(self, user_id: str, status: Union[UserStatus, str]) -> Dict[str, Any]:
        """
        Set a user's status and return the updated user.

        Raises:
            ValueError: If `status` is not ACTIVE or INACTIVE.
            RuntimeError: On non-2xx, carrying the backend's error text.
        """
        status = UserStatus(status)
        logger.info("[UserActions] Toggling user status id=%s status=%s", user_id, status.value)

        async with self._client() as client:
            r = await client.patch(
                f"{self.base}/users/{_seg(user_id)}",
                headers=JSON_HEADERS,
                json=UserStatusUpdate(status=status).model_dump(mode="json"),
            )
        if not r.is_success:
            raise RuntimeError(f"Failed to update status: {r.text}")

        await self.revalidator.revalidate_path(USERS_VIEW)
        return r.json()

    async def _delete_user(self, user_id: str) -> None:
        if not user_id:
            raise ValueError("User ID required")

        async with self._client() as client:
            r = await client.delete(f"{self.base}/users/{_seg(user_id)}", headers=JSON_HEADERS)
        if not r.is_success:
            logger.error("[UserActions] Failed to delete user: %s %s", r.status_code, r.text)
            raise RuntimeError(f"Delete failed ({r.status_code})")

        await self.revalidator.revalidate_path(USERS_VIEW)

    async def delete_user_from_home(self, user_id: str) -> None:
        """Delete a user from the listing; the listing stays where it is."""
        await self._delete_user(user_id)

    async def delete_user(self, user_id: str) -> Redirect:
        """Delete a user and send the browser to the first listing page."""
        await self._delete_user(user_id)
        return Redirect(f"{USERS_VIEW}?page=0")

    # ---- posts & preferences -------------------------------------------------

    async def create_user_post(self, user_id: str, title: str, content: str) -> bool:
        """
        Create a post for `user_id`.

        Raises:
            RuntimeError: On non-2xx.
            httpx.HTTPError: On transport failure.
        """
        try:
            async with self._client() as client:
                r = await client.post(
                    f"{self.base}/users/{_seg(user_id)}/posts",
                    headers=JSON_HEADERS,
                    json=PostCreate(title=title, content=content).model_dump(),
                )
            if not r.is_success:
                logger.error("[UserActions] Failed to create post: %s", r.text)
                raise RuntimeError("Failed to create post")

            await self.revalidator.revalidate_path(f"{USERS_VIEW}/{user_id}")
            return True
        except Exception as e:
            logger.error("[UserActions] create_user_post error: %s", e)
            raise

    async def soft_delete_post(self, post_id: str, user_id: Optional[str] = None) -> bool:
        """
        Delete a post by ID.

        Revalidates the listing, and the owner's detail page when `user_id`
        is known.
        """
        async with self._client() as client:
            r = await client.delete(f"{self.base}/posts/{_seg(post_id)}")
        if not r.is_success:
            raise RuntimeError(f"Failed to delete post ({r.status_code})")

        await self.revalidator.revalidate_path(USERS_VIEW)
        if user_id:
            await self.revalidator.revalidate_path(f"{USERS_VIEW}/{user_id}")
        return True

    async def create_default_preferences(self, user_id: str) -> Dict[str, Any]:
        """Create light/en/notifications-on preferences and return them."""
        async with self._client() as client:
            r = await client.put(
                f"{self.base}/users/{_seg(user_id)}/preferences",
                headers=JSON_HEADERS,
                json=PreferencesUpsert().model_dump(by_alias=True),
            )
        if not r.is_success:
            raise RuntimeError(f"Failed to create default preferences ({r.status_code})")

        await self.revalidator.revalidate_path(f"{USERS_VIEW}/{user_id}")
        return r.json()
