"""Enums and type aliases for tripsaas."""

from enum import StrEnum


class Role(StrEnum):
    SUPERADMIN = "SUPERADMIN"
    ADMIN = "ADMIN"
    SALES = "SALES"
    SUPPORT = "SUPPORT"
    USER = "USER"


class Plan(StrEnum):
    FREE = "FREE"
    BASIC = "BASIC"
    PRO = "PRO"
    ENTERPRISE = "ENTERPRISE"


class PlanResource(StrEnum):
    TOURS = "tours"
    BOOKINGS = "bookings"
    STAFF = "staff"


class Permission(StrEnum):
    MANAGE_TENANTS = "manage:tenants"
    MANAGE_TOURS = "manage:tours"
    VIEW_TOURS = "view:tours"
    MANAGE_BOOKINGS = "manage:bookings"
    VIEW_BOOKINGS = "view:bookings"
    MANAGE_CUSTOMERS = "manage:customers"
    VIEW_CUSTOMERS = "view:customers"
    MANAGE_VENDORS = "manage:vendors"
    VIEW_VENDORS = "view:vendors"
    MANAGE_STAFF = "manage:staff"
    MANAGE_SUPPORT = "manage:support"
    VIEW_REPORTS = "view:reports"


class ResolutionStatus(StrEnum):
    RESOLVED = "resolved"
    NOT_FOUND = "not_found"
    NO_HINT = "no_hint"


class RejectReason(StrEnum):
    UNAUTHENTICATED = "unauthenticated"
    FORBIDDEN = "forbidden"


class SignInProvider(StrEnum):
    CREDENTIALS = "credentials"
    EMAIL = "email"
    GOOGLE = "google"
