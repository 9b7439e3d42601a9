from .users_router import router as users_router
from .posts_router import router as posts_router
from .realtime_router import router as realtime_router
defined_routers = [
    users_router,
    posts_router,
    realtime_router,
    ]
