"""
Pydantic schemas for the portfolio backend API.

Field names are camelCase to match the JSON the site already consumes.
"""

from __future__ import annotations

from typing import Literal, Optional

from pydantic import BaseModel, ConfigDict, Field

Category = Literal[
    "Web App",
    "Mobile App",
    "Dashboard",
    "Scraping",
    "Website",
    "Corporate Website",
    "Mobile",
]
PublishStatus = Literal["draft", "published"]
ProjectStatus = Literal["completed", "ongoing"]


class HealthResponse(BaseModel):
    status: Literal["ok"]


class SignInRequest(BaseModel):
    email: str = Field(..., max_length=320)
    password: str = Field(..., max_length=1024)


class SignInResponse(BaseModel):
    access_token: str
    user: dict


class SuccessResponse(BaseModel):
    success: bool = True


class ProjectPayload(BaseModel):
    """Body of project create/update calls. Unset fields are left alone."""

    model_config = ConfigDict(extra="allow")

    slug: Optional[str] = None
    title: Optional[str] = None
    tagline: Optional[str] = None
    category: Optional[Category] = None
    shortDescription: Optional[str] = None
    overview: Optional[str] = None
    context: Optional[str] = None
    solution: Optional[list[str]] = None
    impact: Optional[list[str]] = None
    tech: Optional[list[str]] = None
    image: Optional[str] = None
    liveUrl: Optional[str] = None
    githubUrl: Optional[str] = None
    caseStudyUrl: Optional[str] = None
    status: Optional[PublishStatus] = None
    featured: Optional[bool] = None
    projectStatus: Optional[ProjectStatus] = None
    role: Optional[str] = None
    timeline: Optional[str] = None
    location: Optional[str] = None


class Project(BaseModel):
    model_config = ConfigDict(extra="allow")

    id: int
    slug: str
    title: str
    tagline: str
    category: str = ""
    shortDescription: str = ""
    overview: str = ""
    context: str = ""
    solution: list[str] = []
    impact: list[str] = []
    tech: list[str] = []
    image: str = ""
    liveUrl: str = ""
    githubUrl: str = ""
    caseStudyUrl: str = ""
    status: str = "published"
    featured: bool = False
    projectStatus: str = "completed"
    role: str = ""
    timeline: str = ""
    location: str = ""
    createdAt: Optional[str] = None
    updatedAt: Optional[str] = None


class ProjectResponse(BaseModel):
    project: Project


class ListProjectsResponse(BaseModel):
    projects: list[Project]


class ContactRequest(BaseModel):
    # Checked by the contact service so missing fields get its messages.
    name: Optional[str] = None
    email: Optional[str] = None
    message: Optional[str] = None


class ContactSubmitResponse(BaseModel):
    success: bool = True
    message: str
    id: int


class Contact(BaseModel):
    id: int
    name: str
    email: str
    message: str
    submittedAt: str
    read: bool
    readAt: Optional[str] = None


class ContactResponse(BaseModel):
    contact: Contact


class ListContactsResponse(BaseModel):
    contacts: list[Contact]


class SiteStats(BaseModel):
    experience: str
    projects: str
    clients: str
    success: str


class SiteHero(BaseModel):
    title: str
    subtitle: str
    description: str


class SiteConfig(BaseModel):
    model_config = ConfigDict(extra="allow")

    stats: SiteStats
    hero: SiteHero


class SiteStatsPatch(BaseModel):
    experience: Optional[str] = None
    projects: Optional[str] = None
    clients: Optional[str] = None
    success: Optional[str] = None


class SiteHeroPatch(BaseModel):
    title: Optional[str] = None
    subtitle: Optional[str] = None
    description: Optional[str] = None


class SiteConfigPatch(BaseModel):
    stats: Optional[SiteStatsPatch] = None
    hero: Optional[SiteHeroPatch] = None


class SiteConfigUpdateResponse(BaseModel):
    success: bool = True
    config: SiteConfig
