"""
Services - the projection engine and the catalog operations built on it.
"""

from vidvault.services.projection import (
    PublicVideoView,
    DetailedVideoView,
    AdminVideoView,
    CatalogStats,
    project_for_list,
    project_for_detail,
    project_for_admin,
    authorize_download,
    authorize_share,
)
from vidvault.services.catalog import CatalogService

__all__ = [
    "PublicVideoView",
    "DetailedVideoView",
    "AdminVideoView",
    "CatalogStats",
    "project_for_list",
    "project_for_detail",
    "project_for_admin",
    "authorize_download",
    "authorize_share",
    "CatalogService",
]
