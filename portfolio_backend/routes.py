"""
HTTP routes for the portfolio backend API.
"""

from __future__ import annotations

import logging
from typing import Optional

from fastapi import APIRouter, BackgroundTasks, Depends, Query

from portfolio_backend.auth import AuthUser, AuthVerifier
from portfolio_backend.contacts import ContactService
from portfolio_backend.dependencies import (
    get_auth_verifier,
    get_contact_service,
    get_optional_user,
    get_project_service,
    get_site_config_service,
    require_admin,
)
from portfolio_backend.errors import UnauthorizedError
from portfolio_backend.projects import ProjectService
from portfolio_backend.schemas import (
    ContactRequest,
    ContactResponse,
    ContactSubmitResponse,
    HealthResponse,
    ListContactsResponse,
    ListProjectsResponse,
    ProjectPayload,
    ProjectResponse,
    PublishStatus,
    SignInRequest,
    SignInResponse,
    SiteConfigPatch,
    SiteConfigUpdateResponse,
    SuccessResponse,
)
from portfolio_backend.site_config import SiteConfigService, default_site_config

logger = logging.getLogger(__name__)

router = APIRouter()


@router.get("/health", response_model=HealthResponse)
def health():
    return HealthResponse(status="ok")


@router.post("/auth/signin", response_model=SignInResponse)
def sign_in(
    payload: SignInRequest, verifier: AuthVerifier = Depends(get_auth_verifier)
):
    session = verifier.sign_in(payload.email, payload.password)
    if session is None:
        raise UnauthorizedError("Invalid credentials")
    return SignInResponse(
        access_token=session.access_token, user=session.user.as_dict()
    )


# Projects


@router.get("/projects", response_model=ListProjectsResponse)
def list_projects(
    status: Optional[PublishStatus] = Query(None),
    featured: Optional[bool] = Query(None),
    user: Optional[AuthUser] = Depends(get_optional_user),
    service: ProjectService = Depends(get_project_service),
):
    """
    Admins see every project; everyone else only sees published ones.
    """
    if user is not None:
        projects = service.list_admin(status=status, featured=featured)
    else:
        projects = service.list_public(featured=featured)
    return ListProjectsResponse(projects=projects)


@router.get("/projects/{slug}", response_model=ProjectResponse)
def get_project(slug: str, service: ProjectService = Depends(get_project_service)):
    return ProjectResponse(project=service.get_by_slug(slug))


@router.post("/projects", response_model=ProjectResponse, status_code=201)
def create_project(
    payload: ProjectPayload,
    _: AuthUser = Depends(require_admin),
    service: ProjectService = Depends(get_project_service),
):
    project = service.create(payload.model_dump(exclude_unset=True))
    return ProjectResponse(project=project)


@router.put("/projects/{project_id}", response_model=ProjectResponse)
def update_project(
    project_id: int,
    payload: ProjectPayload,
    _: AuthUser = Depends(require_admin),
    service: ProjectService = Depends(get_project_service),
):
    project = service.update(project_id, payload.model_dump(exclude_unset=True))
    return ProjectResponse(project=project)


@router.delete("/projects/{project_id}", response_model=SuccessResponse)
def delete_project(
    project_id: int,
    _: AuthUser = Depends(require_admin),
    service: ProjectService = Depends(get_project_service),
):
    service.delete(project_id)
    return SuccessResponse()


# Contact submissions


@router.post("/contact", response_model=ContactSubmitResponse)
def submit_contact(
    payload: ContactRequest,
    background_tasks: BackgroundTasks,
    service: ContactService = Depends(get_contact_service),
):
    """
    Store the submission; the operator email goes out after the response.
    """
    submission = service.submit(
        payload.name or "",
        payload.email or "",
        payload.message or "",
        dispatch=background_tasks.add_task,
    )
    return ContactSubmitResponse(
        message="Message sent successfully!", id=submission.id
    )


@router.get("/contact", response_model=ListContactsResponse)
def list_contacts(
    _: AuthUser = Depends(require_admin),
    service: ContactService = Depends(get_contact_service),
):
    return ListContactsResponse(contacts=[c.as_dict() for c in service.list()])


@router.put("/contact/{contact_id}/read", response_model=ContactResponse)
def mark_contact_read(
    contact_id: int,
    _: AuthUser = Depends(require_admin),
    service: ContactService = Depends(get_contact_service),
):
    return ContactResponse(contact=service.mark_read(contact_id).as_dict())


@router.delete("/contact/{contact_id}", response_model=SuccessResponse)
def delete_contact(
    contact_id: int,
    _: AuthUser = Depends(require_admin),
    service: ContactService = Depends(get_contact_service),
):
    service.delete(contact_id)
    return SuccessResponse()


# Site config


@router.get("/config")
def get_site_config(service: SiteConfigService = Depends(get_site_config_service)):
    try:
        return service.get()
    except Exception:
        logger.exception("Failed to load site config; serving default")
        return default_site_config()


@router.put("/config", response_model=SiteConfigUpdateResponse)
def update_site_config(
    payload: SiteConfigPatch,
    _: AuthUser = Depends(require_admin),
    service: SiteConfigService = Depends(get_site_config_service),
):
    config = service.update(payload.model_dump(exclude_unset=True, exclude_none=True))
    return SiteConfigUpdateResponse(config=config)
