from dependency_injector import containers, providers

from app.core.realtime import ConnectionManager
from app.core.revalidation import ResponseCache, ViewRevalidator
from app.core.settings import settings
from app.utils.html_renderer import ConsoleRenderer
from app.v1_0.services import UserActionsService

class APIContainer(containers.DeclarativeContainer):
    config = providers.Object(settings)
    http_transport = providers.Object(None)

    response_cache = providers.Singleton(ResponseCache)
    realtime_manager = providers.Singleton(ConnectionManager)
    view_revalidator = providers.Singleton(
        ViewRevalidator,
        cache=response_cache,
        manager=realtime_manager,
    )

    user_actions_service = providers.Singleton(
        UserActionsService,
        base_url=config.provided.BASE_URL,
        revalidator=view_revalidator,
        cache=response_cache,
        api_prefix=config.provided.BACKEND_API_PREFIX,
        timeout=config.provided.HTTP_TIMEOUT_SEC,
        list_ttl=config.provided.USERS_REVALIDATE_SECONDS,
        transport=http_transport,
    )

    console_renderer = providers.Singleton(
        ConsoleRenderer,
        app_name=config.provided.APP_NAME,
    )
