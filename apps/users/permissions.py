"""
-------------------------------------------------------------------------
System: LGU-FMS (Municipal Financial Management System)
Client: Municipal Local Government Unit
Team Lead: Jamil Shah
Developers: Ali Asghar, Akhtar Munir and Zarif Khan
Description: Access policy for the fiscal workflow engine.
             Maps an actor's role to the module it may operate. The
             role is resolved once per request and passed explicitly.
-------------------------------------------------------------------------
"""
from dataclasses import dataclass
from typing import Any, Optional

from apps.core.exceptions import UnauthorizedRoleException
from apps.users.models import Role


@dataclass(frozen=True)
class Actor:
    """
    The authenticated caller of a service operation.

    Attributes:
        user_id: Primary key of the acting user (recorded in created_by etc.).
        role: The role the user acts under.
    """

    user_id: int
    role: Optional[Role]

    @property
    def module(self) -> Optional[str]:
        return self.role.module if self.role else None


def authorize(role: Optional[Role], required_module: str) -> bool:
    """
    Check if a role may operate a module.

    Pure predicate with no side effects.

    Args:
        role: The actor's role, or None if the user has no role.
        required_module: RoleModule value the operation belongs to.

    Returns:
        True iff the role's module is the required one or is admin.
    """
    if role is None:
        return False
    return role.covers(required_module)


def ensure_module_access(actor: Actor, required_module: str) -> None:
    """
    Gate a mutating operation on the actor's role.

    Must be called before any read-for-write so a refusal leaves
    no partial writes behind.

    Raises:
        UnauthorizedRoleException: If the actor's role does not cover the module.
    """
    if not authorize(actor.role, required_module):
        raise UnauthorizedRoleException(
            f"This action requires access to the '{required_module}' module.",
            details={
                'user_id': actor.user_id,
                'role_module': actor.module,
                'required_module': required_module,
            }
        )


def resolve_actor(storage: Any, user_id: int, role_id: Optional[int]) -> Actor:
    """
    Build the Actor for a request from the ids supplied by the auth layer.

    Args:
        storage: StoragePort used to load the role.
        user_id: Authenticated user id.
        role_id: The user's role id.

    Returns:
        Actor carrying the loaded Role.

    Raises:
        UnauthorizedRoleException: If the role id is missing or unknown.
    """
    role = storage.get(Role, role_id) if role_id is not None else None
    if role is None:
        raise UnauthorizedRoleException(
            "Invalid user role.",
            details={'user_id': user_id, 'role_id': role_id}
        )
    return Actor(user_id=user_id, role=role)
