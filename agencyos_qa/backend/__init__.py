"""Supabase inspection and seeding for the AgencyOS project."""

from agencyos_qa.backend.client import create_admin_client
from agencyos_qa.backend.fixtures import (
    DEFAULT_ATTACHMENTS_BUCKET,
    EXPECTED_TABLES,
    KNOWLEDGE_COLLECTIONS,
    SeedUser,
    demo_users,
)
from agencyos_qa.backend.inspection import BackendInspector

__all__ = [
    "BackendInspector",
    "DEFAULT_ATTACHMENTS_BUCKET",
    "EXPECTED_TABLES",
    "KNOWLEDGE_COLLECTIONS",
    "SeedUser",
    "create_admin_client",
    "demo_users",
]
