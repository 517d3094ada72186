"""HTTP surface: identity gate, error envelope, and the profile/campaign routers."""

from marketplace.api.campaigns import router as campaigns_router
from marketplace.api.errors import register_exception_handlers
from marketplace.api.profiles import router as profiles_router

__all__ = [
    "campaigns_router",
    "profiles_router",
    "register_exception_handlers",
]
