"""Principals module - role and permission assignment to principals."""

from permissions_manager.modules.principals.routes import router


# Module metadata
__module_info__ = {
    "name": "principals",
    "version": "1.0.0",
    "description": "Assignment of roles and permissions to external principals",
    "dependencies": ["roles", "permissions"],
}

__all__ = ["router"]
