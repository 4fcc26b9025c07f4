# laundry_saas/constants/activity_codes.py

from enum import Enum


class ActivityCode(str, Enum):
    # ---------------- AUTH ----------------
    LOGIN = "LOGIN"
    LOGOUT = "LOGOUT"

    # ---------------- TENANCIES ----------------
    CREATE_TENANCY = "CREATE_TENANCY"
    DEACTIVATE_TENANCY = "DEACTIVATE_TENANCY"

    # ---------------- DISCOUNTS ----------------
    CREATE_DISCOUNT = "CREATE_DISCOUNT"
    UPDATE_DISCOUNT = "UPDATE_DISCOUNT"
    DELETE_DISCOUNT = "DELETE_DISCOUNT"
    TOGGLE_DISCOUNT = "TOGGLE_DISCOUNT"
    APPLY_DISCOUNTS = "APPLY_DISCOUNTS"
    EXPIRE_DISCOUNT = "EXPIRE_DISCOUNT"

    # ---------------- CAMPAIGNS ----------------
    CREATE_CAMPAIGN = "CREATE_CAMPAIGN"
    UPDATE_CAMPAIGN = "UPDATE_CAMPAIGN"
    DELETE_CAMPAIGN = "DELETE_CAMPAIGN"
    CHANGE_CAMPAIGN_STATUS = "CHANGE_CAMPAIGN_STATUS"
    APPROVE_CAMPAIGN = "APPROVE_CAMPAIGN"
    APPLY_CAMPAIGN = "APPLY_CAMPAIGN"
    COMPLETE_CAMPAIGN = "COMPLETE_CAMPAIGN"
