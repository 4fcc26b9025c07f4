# laundry_saas/routers/__init__.py

from .auth.auth_router import router as auth_router
from .auth.activity_router import router as activity_router

from .superadmin.tenancy_router import router as superadmin_tenancy_router
from .superadmin.campaign_router import router as superadmin_campaign_router

from .admin.discount_router import router as admin_discount_router
from .admin.campaign_router import router as admin_campaign_router

from .customer.discount_router import router as customer_discount_router
from .customer.campaign_router import router as customer_campaign_router


__all__ = [
"auth_router",
"activity_router",

"superadmin_tenancy_router",
"superadmin_campaign_router",

"admin_discount_router",
"admin_campaign_router",

"customer_discount_router",
"customer_campaign_router",
]
