"""
Backend package for the portfolio site.

This package provides a FastAPI application over a key-value store so the
public site and the admin dashboard share one small content API: projects,
contact submissions and the site config.
"""
