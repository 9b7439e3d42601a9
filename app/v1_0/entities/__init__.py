from .page import UsersPageDTO, USERS_PAGE_SIZE
from .action_DTO import AddUserResult, Redirect


__all__ = [
    "UsersPageDTO", "USERS_PAGE_SIZE",
    "AddUserResult", "Redirect",
]
