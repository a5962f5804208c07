"""Presentation-boundary services."""

from .dashboard import (
    DashboardService,
    build_brand_rankings,
    build_dashboard_payload,
    build_overview,
)

__all__ = [
    "DashboardService",
    "build_brand_rankings",
    "build_dashboard_payload",
    "build_overview",
]
