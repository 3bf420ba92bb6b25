"""Permissions module - permission CRUD and role assignment."""

from permissions_manager.modules.permissions.routes import router


# Module metadata
__module_info__ = {
    "name": "permissions",
    "version": "1.0.0",
    "description": "Permission management with categories and role sync",
    "dependencies": ["roles"],
}

__all__ = ["router"]
