from typing import List

from fastapi import APIRouter, Depends, status
from sqlmodel import Session, select

from ..core.database import get_session
from ..core.permission import Permission, require_permission
from ..core.security import get_current_user
from ..models.projects import Project, ProjectMember
from ..models.types import ProjectRole
from ..models.users import User
from ..schemas.projects import ProjectCreate, ProjectMemberRead, ProjectRead


router = APIRouter()


@router.post("", response_model=ProjectRead, status_code=status.HTTP_201_CREATED)
async def create_project(
    project_data: ProjectCreate,
    current_user: User = Depends(get_current_user),
    session: Session = Depends(get_session),
):
    project = Project(
        name=project_data.name,
        description=project_data.description,
        owner_id=current_user.id,
    )
    session.add(project)
    session.commit()
    session.refresh(project)
    return project


@router.get("/{project_id}", response_model=ProjectRead)
async def get_project(project: Project = Depends(require_permission(Permission.VIEW_PROJECT))):
    return project


@router.get("/{project_id}/members", response_model=List[ProjectMemberRead])
async def list_members(
    project: Project = Depends(require_permission(Permission.VIEW_MEMBERS)),
    session: Session = Depends(get_session),
):
    owner = session.get(User, project.owner_id)
    members = [
        ProjectMemberRead(
            user_id=owner.id,
            username=owner.username,
            role=ProjectRole.OWNER,
            joined_at=project.created_at,
        )
    ]
    rows = session.exec(
        select(ProjectMember, User)
        .join(User, ProjectMember.user_id == User.id)
        .where(ProjectMember.project_id == project.id)
    ).all()
    members.extend(
        ProjectMemberRead(
            user_id=user.id,
            username=user.username,
            role=member.role,
            joined_at=member.joined_at,
        )
        for member, user in rows
    )
    return members
