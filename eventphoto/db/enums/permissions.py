"""Role permission helper sets."""

from eventphoto.db.enums.auth import Role

# Roles that belong to an organization and can read its events
ROLES_CAN_VIEW_EVENTS = {
    Role.ORGANIZATION_ADMIN,
    Role.ORGANIZATION_EDITOR,
    Role.ORGANIZATION_VIEWER,
}

# Roles that can create/update/delete events, photos and participants
ROLES_CAN_MANAGE_EVENTS = {Role.ORGANIZATION_ADMIN, Role.ORGANIZATION_EDITOR}

# Roles that can add members and view billing
ROLES_CAN_MANAGE_ORG = {Role.ORGANIZATION_ADMIN}
