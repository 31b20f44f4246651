"""
Project content: CRUD over portfolio projects with public/admin visibility.
"""

from __future__ import annotations

import logging
import re
from typing import Any, Optional

from portfolio_backend.errors import NotFoundError, ValidationError
from portfolio_backend.kv_store import KvStore, next_id, utc_now

logger = logging.getLogger(__name__)

PROJECT_PREFIX = "project:"

CATEGORIES = (
    "Web App",
    "Mobile App",
    "Dashboard",
    "Scraping",
    "Website",
    "Corporate Website",
    "Mobile",
)
STATUSES = ("draft", "published")
PROJECT_STATUSES = ("completed", "ongoing")

SLUG_PATTERN = re.compile(r"^[a-z0-9]+(?:-[a-z0-9]+)*$")

_STRING_FIELDS = (
    "slug",
    "title",
    "tagline",
    "category",
    "shortDescription",
    "overview",
    "context",
    "image",
    "liveUrl",
    "githubUrl",
    "caseStudyUrl",
    "role",
    "timeline",
    "location",
)
_LIST_FIELDS = ("solution", "impact", "tech")
_REQUIRED_FIELDS = ("title", "tagline")


def slugify(title: str) -> str:
    """Lowercase, collapse non-alphanumeric runs to '-', trim edge hyphens."""
    return re.sub(r"[^a-z0-9]+", "-", title.lower()).strip("-")


def normalize_project(raw: dict) -> dict:
    """Fill in defaults for fields older records may lack."""
    project = dict(raw)
    for name in _STRING_FIELDS:
        if project.get(name) is None:
            project[name] = ""
    for name in _LIST_FIELDS:
        if project.get(name) is None:
            project[name] = []
    project["status"] = project.get("status") or "published"
    project["projectStatus"] = project.get("projectStatus") or "completed"
    project["featured"] = bool(project.get("featured", False))
    return project


def merge_project(existing: dict, patch: dict) -> dict:
    """
    Shallow merge: top-level keys in ``patch`` replace those in ``existing``.

    Nested values are replaced whole, never merged; last writer wins.
    """
    merged = dict(existing)
    merged.update(patch)
    return merged


def sort_projects(projects: list[dict]) -> list[dict]:
    """Featured first, then most recently created (highest id) first."""
    return sorted(
        projects,
        key=lambda p: (not p.get("featured", False), -int(p.get("id") or 0)),
    )


def _check_enum(data: dict, name: str, allowed: tuple[str, ...]) -> None:
    value = data.get(name)
    if value is not None and value not in allowed:
        raise ValidationError(
            f"Invalid {name} '{value}'; expected one of: {', '.join(allowed)}"
        )


def _validate_fields(data: dict, *, partial: bool) -> None:
    for name in _REQUIRED_FIELDS:
        if partial and name not in data:
            continue
        value = data.get(name)
        if not isinstance(value, str) or not value.strip():
            raise ValidationError(f"Project {name} is required")
    slug = data.get("slug")
    if partial and "slug" in data and not slug:
        raise ValidationError("Slug cannot be empty")
    if slug is not None and not SLUG_PATTERN.match(slug):
        raise ValidationError(
            "Slug must contain only lowercase letters, digits and single hyphens"
        )
    _check_enum(data, "category", CATEGORIES)
    _check_enum(data, "status", STATUSES)
    _check_enum(data, "projectStatus", PROJECT_STATUSES)


class ProjectService:
    """Project records stored under ``project:<id>``."""

    def __init__(self, store: KvStore):
        self.store = store

    def _all(self) -> list[dict]:
        return [
            normalize_project(item)
            for item in self.store.get_by_prefix(PROJECT_PREFIX)
        ]

    @staticmethod
    def _filter(
        projects: list[dict],
        status: Optional[str] = None,
        featured: Optional[bool] = None,
    ) -> list[dict]:
        if status:
            projects = [p for p in projects if p["status"] == status]
        if featured:
            projects = [p for p in projects if p["featured"]]
        return sort_projects(projects)

    def list_public(self, featured: Optional[bool] = None) -> list[dict]:
        return self._filter(self._all(), status="published", featured=featured)

    def list_admin(
        self, status: Optional[str] = None, featured: Optional[bool] = None
    ) -> list[dict]:
        return self._filter(self._all(), status=status, featured=featured)

    def get_by_slug(self, slug: str) -> dict:
        for project in self._all():
            if project["slug"] == slug:
                return project
        raise NotFoundError("Project not found")

    def get(self, project_id: int) -> Optional[dict]:
        stored = self.store.get(f"{PROJECT_PREFIX}{project_id}")
        return normalize_project(stored) if stored is not None else None

    def _ensure_unique_slug(
        self, slug: str, projects: list[dict], exclude_id: Optional[int] = None
    ) -> None:
        for project in projects:
            if project["slug"] == slug and project.get("id") != exclude_id:
                raise ValidationError(f"Slug '{slug}' is already in use")

    def create(self, data: dict[str, Any]) -> dict:
        data = dict(data)
        # A cleared slug field means "derive it from the title".
        slug = data.get("slug")
        if slug is None or (isinstance(slug, str) and not slug.strip()):
            data.pop("slug", None)
        _validate_fields(data, partial=False)
        existing = self._all()

        project = dict(data)
        project["slug"] = data.get("slug") or slugify(data["title"])
        if not project["slug"]:
            raise ValidationError("Could not derive a slug from the title")
        self._ensure_unique_slug(project["slug"], existing)

        now = utc_now()
        project["id"] = next_id(existing)
        project["createdAt"] = now
        project["updatedAt"] = now
        project.setdefault("status", "published")
        project.setdefault("featured", False)
        project = normalize_project(project)

        self.store.set(f"{PROJECT_PREFIX}{project['id']}", project)
        logger.info("Created project %s (%s)", project["id"], project["slug"])
        return project

    def update(self, project_id: int, patch: dict[str, Any]) -> dict:
        existing = self.get(project_id)
        if existing is None:
            raise NotFoundError("Project not found")
        _validate_fields(patch, partial=True)
        if patch.get("slug"):
            self._ensure_unique_slug(patch["slug"], self._all(), exclude_id=project_id)

        updated = merge_project(existing, patch)
        updated["id"] = existing["id"]
        updated["createdAt"] = existing.get("createdAt")
        updated["updatedAt"] = utc_now()
        updated = normalize_project(updated)

        self.store.set(f"{PROJECT_PREFIX}{project_id}", updated)
        return updated

    def delete(self, project_id: int) -> None:
        # Deleting an unknown id is reported as success.
        self.store.delete(f"{PROJECT_PREFIX}{project_id}")
