"""
Dependency wiring for the FastAPI app.
"""

from __future__ import annotations

import logging
from typing import Optional

from fastapi import Depends, Header

from portfolio_backend.auth import (
    AuthUser,
    AuthVerifier,
    StaticTokenAuthVerifier,
    SupabaseAuthVerifier,
)
from portfolio_backend.config import get_settings
from portfolio_backend.contacts import ContactService
from portfolio_backend.errors import UnauthorizedError
from portfolio_backend.kv_store import InMemoryKvStore, KvStore, RedisKvStore, SqlKvStore
from portfolio_backend.notifications import (
    EmailNotifier,
    InMemoryEmailNotifier,
    ResendEmailNotifier,
)
from portfolio_backend.projects import ProjectService
from portfolio_backend.site_config import SiteConfigService

logger = logging.getLogger(__name__)

_kv_store: KvStore | None = None
_auth_verifier: AuthVerifier | None = None
_email_notifier: EmailNotifier | None = None


def get_kv_store() -> KvStore:
    """
    Return a singleton store so state persists across requests.
    """
    global _kv_store
    if _kv_store:
        return _kv_store

    settings = get_settings()
    if settings.use_in_memory_backends:
        _kv_store = InMemoryKvStore()
    elif settings.database_url:
        _kv_store = SqlKvStore(settings.database_url)
    elif settings.redis_url:
        _kv_store = RedisKvStore(
            url=settings.redis_url, namespace=settings.redis_key_namespace
        )
    else:
        logger.warning("No DATABASE_URL or REDIS_URL set; using in-memory store")
        _kv_store = InMemoryKvStore()
    return _kv_store


def get_auth_verifier() -> AuthVerifier:
    global _auth_verifier
    if _auth_verifier:
        return _auth_verifier

    settings = get_settings()
    if settings.supabase_url and settings.supabase_anon_key:
        _auth_verifier = SupabaseAuthVerifier(
            url=settings.supabase_url,
            anon_key=settings.supabase_anon_key,
            service_role_key=settings.supabase_service_role_key,
        )
    else:
        _auth_verifier = StaticTokenAuthVerifier(
            token=settings.admin_token,
            email=settings.admin_email,
            password=settings.admin_password,
        )
    return _auth_verifier


def get_email_notifier() -> EmailNotifier:
    global _email_notifier
    if _email_notifier:
        return _email_notifier

    settings = get_settings()
    if settings.resend_api_key:
        _email_notifier = ResendEmailNotifier(
            api_key=settings.resend_api_key,
            sender=settings.notification_from,
            recipients=settings.notification_to,
            timezone_name=settings.notification_timezone,
            site_name=settings.site_name,
        )
    else:
        _email_notifier = InMemoryEmailNotifier()
    return _email_notifier


def get_contact_service(
    store: KvStore = Depends(get_kv_store),
    notifier: EmailNotifier = Depends(get_email_notifier),
) -> ContactService:
    return ContactService(store, notifier)


def get_project_service(store: KvStore = Depends(get_kv_store)) -> ProjectService:
    return ProjectService(store)


def get_site_config_service(
    store: KvStore = Depends(get_kv_store),
) -> SiteConfigService:
    return SiteConfigService(store)


def get_optional_user(
    authorization: Optional[str] = Header(None),
    verifier: AuthVerifier = Depends(get_auth_verifier),
) -> Optional[AuthUser]:
    return verifier.verify(authorization)


def require_admin(user: Optional[AuthUser] = Depends(get_optional_user)) -> AuthUser:
    """Guard for admin-only routes; runs before any service call."""
    if user is None:
        raise UnauthorizedError()
    return user
