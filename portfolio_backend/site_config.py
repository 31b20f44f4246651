"""
Singleton site configuration stored under ``site-config``.
"""

from __future__ import annotations

import copy

from portfolio_backend.kv_store import KvStore

SITE_CONFIG_KEY = "site-config"

DEFAULT_SITE_CONFIG: dict = {
    "stats": {
        "experience": "3",
        "projects": "10",
        "clients": "10",
        "success": "100%",
    },
    "hero": {
        "title": "Muhammad Shehroz Shafiq",
        "subtitle": "Full-Stack Developer",
        "description": (
            "Crafting scalable web and mobile applications with modern "
            "technologies. Specialized in MERN stack, Flutter, and cloud-native "
            "solutions that drive real business impact."
        ),
    },
}


def default_site_config() -> dict:
    return copy.deepcopy(DEFAULT_SITE_CONFIG)


def merge_site_config(existing: dict, patch: dict) -> dict:
    """
    Merge ``patch`` into ``existing`` section by section.

    Top-level keys absent from the patch are kept. When both sides hold a
    dict for a key (``stats``, ``hero``), the patch's keys overwrite the
    section's keys one level deep, so a patch of ``{"stats": {"experience":
    "5"}}`` leaves the other stats untouched. Anything deeper, and any
    non-dict value, is replaced whole. Last writer wins.
    """
    merged = copy.deepcopy(existing)
    for key, value in patch.items():
        current = merged.get(key)
        if isinstance(current, dict) and isinstance(value, dict):
            merged[key] = {**current, **value}
        else:
            merged[key] = value
    return merged


class SiteConfigService:
    def __init__(self, store: KvStore):
        self.store = store

    def get(self) -> dict:
        stored = self.store.get(SITE_CONFIG_KEY)
        return stored if stored is not None else default_site_config()

    def update(self, patch: dict) -> dict:
        config = merge_site_config(self.get(), patch)
        self.store.set(SITE_CONFIG_KEY, config)
        return config
