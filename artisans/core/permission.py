from enum import Flag, auto
from fastapi import Depends
from sqlmodel import Session

from .database import get_session
from .errors import NotFoundError, PermissionDenied
from .security import get_current_user
from ..models.projects import Project
from ..models.types import ProjectRole
from ..models.users import User


class Permission(Flag):
    NONE = 0
    VIEW_PROJECT = auto()
    VIEW_MEMBERS = auto()
    INVITE_MEMBERS = auto()


ROLE_PERMISSIONS = {
    ProjectRole.OWNER: (
        Permission.VIEW_PROJECT |
        Permission.VIEW_MEMBERS |
        Permission.INVITE_MEMBERS
    ),
    ProjectRole.PROJECT_MANAGER: (
        Permission.VIEW_PROJECT |
        Permission.VIEW_MEMBERS |
        Permission.INVITE_MEMBERS
    ),
    ProjectRole.CONTRACTOR: (
        Permission.VIEW_PROJECT |
        Permission.VIEW_MEMBERS
    ),
    ProjectRole.INSPECTOR: (
        Permission.VIEW_PROJECT |
        Permission.VIEW_MEMBERS
    ),
    ProjectRole.RELATIVE: Permission.VIEW_PROJECT,
}


def require_permission(permission: Permission):
    """Dependency factory: resolves the `project_id` path parameter and checks the caller's role on it."""

    def dependency(
        project_id: int,
        current_user: User = Depends(get_current_user),
        session: Session = Depends(get_session),
    ) -> Project:
        project = session.get(Project, project_id)
        if not project:
            raise NotFoundError("Project", project_id)

        role = project.get_member_role(current_user.id)
        if role is None:
            raise NotFoundError("Project", project_id)

        if not (ROLE_PERMISSIONS[role] & permission):
            raise PermissionDenied()
        return project

    return dependency
