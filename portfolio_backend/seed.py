"""
Starter projects for a fresh store.
"""

from __future__ import annotations

import logging
from typing import Iterable

from portfolio_backend.projects import ProjectService, slugify

logger = logging.getLogger(__name__)

INITIAL_PROJECTS: list[dict] = [
    {
        "title": "SOCIALVIBING.ONLINE",
        "tagline": "Social Media Analytics Dashboard",
        "category": "Dashboard",
        "shortDescription": (
            "A social media analytics platform that provides real-time insights "
            "and automation for content creators and brands."
        ),
        "overview": (
            "A comprehensive social media analytics platform that provides "
            "real-time insights and automation for content creators and brands."
        ),
        "solution": [
            "Real-time data synchronization across multiple social platforms",
            "AI-powered content recommendations and scheduling",
            "Advanced analytics with custom reporting",
            "Team collaboration tools and workflow automation",
            "RESTful API for third-party integrations",
        ],
        "tech": ["React", "Node.js", "Express", "MongoDB", "Socket.io", "Redis"],
        "image": "https://images.unsplash.com/photo-1759752394755-1241472b589d?w=1080",
        "liveUrl": "https://socialvibing.online",
        "featured": True,
    },
    {
        "title": "TOUR EASE",
        "tagline": "Travel Booking Mobile Application",
        "category": "Mobile App",
        "shortDescription": (
            "A travel booking app built with Flutter, featuring integrated maps, "
            "payment processing, and real-time availability."
        ),
        "solution": [
            "Cross-platform mobile app (iOS & Android)",
            "Interactive map-based destination browsing",
            "Secure payment processing with multiple gateways",
            "Real-time booking and availability management",
            "Offline mode with local data caching",
        ],
        "tech": ["Flutter", "Dart", "Firebase", "Google Maps API", "Stripe"],
        "image": "https://images.unsplash.com/photo-1673515335048-ace62cf73a26?w=1080",
    },
    {
        "title": "SCHOLARIQ",
        "tagline": "AI-Powered Scholarship Platform",
        "category": "Scraping",
        "shortDescription": (
            "A scholarship discovery platform that uses web scraping and machine "
            "learning to match students with relevant opportunities."
        ),
        "solution": [
            "Automated scholarship data scraping from 500+ sources",
            "AI-powered matching algorithm based on student profiles",
            "Admin dashboard for content management",
            "Email notifications and deadline reminders",
            "Advanced search and filtering capabilities",
        ],
        "tech": ["React Native", "Python", "PostgreSQL", "Beautiful Soup", "FastAPI", "ML"],
        "image": "https://images.unsplash.com/photo-1665470909939-959569b20021?w=1080",
    },
]


def seed_projects(service: ProjectService, projects: Iterable[dict]) -> int:
    """Create each project whose slug is not taken yet. Returns how many were created."""
    existing = {p["slug"] for p in service.list_admin()}
    created = 0
    for data in projects:
        slug = data.get("slug") or slugify(data.get("title", ""))
        if slug in existing:
            logger.info("Skipping %s: already present", slug)
            continue
        service.create(data)
        existing.add(slug)
        created += 1
    return created
