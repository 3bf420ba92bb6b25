"""Roles module - role CRUD, duplication and permission sync."""

from permissions_manager.modules.roles.routes import router


# Module metadata
__module_info__ = {
    "name": "roles",
    "version": "1.0.0",
    "description": "Role management with protected roles and duplication",
    "dependencies": ["permissions"],
}

__all__ = ["router"]
