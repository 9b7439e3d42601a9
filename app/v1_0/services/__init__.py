from .user_actions_service import UserActionsService, parse_page_param
__all__=[
    "UserActionsService",
    "parse_page_param",
    ]
