# laundry_saas/constants/error_codes.py

from enum import Enum


class ErrorCode(str, Enum):
    # ---------------- GENERIC ----------------
    VALIDATION_ERROR = "VALIDATION_ERROR"
    UNAUTHORIZED = "UNAUTHORIZED"
    PERMISSION_DENIED = "PERMISSION_DENIED"
    NOT_FOUND = "NOT_FOUND"
    CONFLICT = "CONFLICT"
    INTERNAL_ERROR = "INTERNAL_ERROR"

    # ---------------- TENANCY ----------------
    TENANCY_NOT_FOUND = "TENANCY_NOT_FOUND"
    TENANCY_SLUG_EXISTS = "TENANCY_SLUG_EXISTS"
    TENANCY_REQUIRED = "TENANCY_REQUIRED"
    TENANCY_INACTIVE = "TENANCY_INACTIVE"

    # ---------------- USERS ----------------
    USER_EMAIL_EXISTS = "USER_EMAIL_EXISTS"
    USER_INACTIVE = "USER_INACTIVE"
    INVALID_CREDENTIALS = "INVALID_CREDENTIALS"

    # ---------------- DISCOUNTS ----------------
    DISCOUNT_NOT_FOUND = "DISCOUNT_NOT_FOUND"
    DISCOUNT_INVALID_RANGE = "DISCOUNT_INVALID_RANGE"
    DISCOUNT_FETCH_FAILED = "DISCOUNT_FETCH_FAILED"
    DISCOUNT_LIMIT_REACHED = "DISCOUNT_LIMIT_REACHED"

    # ---------------- CAMPAIGNS ----------------
    CAMPAIGN_NOT_FOUND = "CAMPAIGN_NOT_FOUND"
    CAMPAIGN_INVALID_RANGE = "CAMPAIGN_INVALID_RANGE"
    CAMPAIGN_INVALID_PROMOTION = "CAMPAIGN_INVALID_PROMOTION"
    CAMPAIGN_INVALID_TRANSITION = "CAMPAIGN_INVALID_TRANSITION"
    CAMPAIGN_NOT_APPLICABLE = "CAMPAIGN_NOT_APPLICABLE"
    CAMPAIGN_NOT_EDITABLE = "CAMPAIGN_NOT_EDITABLE"
