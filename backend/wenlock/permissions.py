"""
Operation -> allowed roles. Routers name an operation and the single
authorize() gate in wenlock.auth checks it against this table.
"""

from wenlock.enums import Role

ADMIN = frozenset({Role.ADMIN})
ALL_STAFF = frozenset(Role)

ACCESS_RULES: dict[str, frozenset[Role]] = {
    "user.register": ADMIN,
    "user.list": ADMIN,
    "user.read": ADMIN,
    "user.update": ADMIN,
    "user.delete": ADMIN,

    "schedule.read": ALL_STAFF,
    "schedule.create": frozenset({Role.ADMIN, Role.OT_STAFF}),
    "schedule.update": frozenset({Role.ADMIN, Role.OT_STAFF}),
    "schedule.delete": ADMIN,

    "token.read": ALL_STAFF,
    "token.advance": frozenset({Role.ADMIN, Role.OT_STAFF, Role.PHARMACY_STAFF}),
    "token.reset": ADMIN,

    "inventory.read": frozenset({Role.ADMIN, Role.PHARMACY_STAFF, Role.GENERAL_STAFF}),
    "inventory.low_stock": frozenset({Role.ADMIN, Role.PHARMACY_STAFF}),
    "inventory.create": frozenset({Role.ADMIN, Role.PHARMACY_STAFF}),
    "inventory.update": frozenset({Role.ADMIN, Role.PHARMACY_STAFF}),
    "inventory.delete": ADMIN,

    "alert.read_active": ALL_STAFF,
    "alert.read_all": ADMIN,
    "alert.trigger": ADMIN,
    "alert.deactivate": ADMIN,

    "audit.read": ADMIN,

    "report.schedules": frozenset({Role.ADMIN, Role.GENERAL_STAFF, Role.OT_STAFF}),
    "report.inventory": frozenset({Role.ADMIN, Role.PHARMACY_STAFF, Role.GENERAL_STAFF}),
    "report.alerts": frozenset({Role.ADMIN, Role.GENERAL_STAFF}),
    "report.audit": ADMIN,

    "integration.ehr_sync": ADMIN,
    "integration.lab_results": frozenset({Role.ADMIN, Role.OT_STAFF, Role.GENERAL_STAFF}),
}


def allowed_roles(operation: str) -> frozenset[Role]:
    # Unknown operations are a programming error, not a request error.
    return ACCESS_RULES[operation]
