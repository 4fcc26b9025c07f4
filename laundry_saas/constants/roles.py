# laundry_saas/constants/roles.py

from enum import Enum


class Role(str, Enum):
    SUPERADMIN = "superadmin"
    ADMIN = "admin"
    CUSTOMER = "customer"
