"""Static role → permission table.

Flat by intent: there is no role inheritance, so a new permission atom has
to be added to every role row that should hold it.
"""

from __future__ import annotations

from types import MappingProxyType
from typing import TYPE_CHECKING

from tripsaas.types import Permission, Role

if TYPE_CHECKING:
    from collections.abc import Mapping

ROLE_PERMISSIONS: Mapping[Role, frozenset[Permission]] = MappingProxyType(
    {
        Role.SUPERADMIN: frozenset(Permission),
        Role.ADMIN: frozenset(
            {
                Permission.MANAGE_TOURS,
                Permission.VIEW_TOURS,
                Permission.MANAGE_BOOKINGS,
                Permission.VIEW_BOOKINGS,
                Permission.MANAGE_CUSTOMERS,
                Permission.VIEW_CUSTOMERS,
                Permission.MANAGE_VENDORS,
                Permission.VIEW_VENDORS,
                Permission.MANAGE_STAFF,
                Permission.VIEW_REPORTS,
            }
        ),
        Role.SALES: frozenset(
            {
                Permission.MANAGE_BOOKINGS,
                Permission.VIEW_BOOKINGS,
                Permission.VIEW_CUSTOMERS,
                Permission.VIEW_TOURS,
            }
        ),
        Role.SUPPORT: frozenset(
            {
                Permission.VIEW_BOOKINGS,
                Permission.VIEW_CUSTOMERS,
                Permission.MANAGE_SUPPORT,
            }
        ),
        Role.USER: frozenset({Permission.VIEW_BOOKINGS}),
    }
)


def permissions_for(role: Role | str) -> frozenset[Permission]:
    """Return the permission set for a role; unknown roles get none."""
    try:
        return ROLE_PERMISSIONS[Role(role)]
    except ValueError:
        return frozenset()


def has_permission(role: Role | str, permission: Permission | str) -> bool:
    try:
        atom = Permission(permission)
    except ValueError:
        return False
    return atom in permissions_for(role)
