"""Seed data for the demo AgencyOS project.

Accounts and knowledge-base content the UI scenarios expect to find.
Passwords are not stored here; callers inject them from configuration.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

# profiles.role values used by the application
ROLE_ADMIN = "admin"
ROLE_TEAM = "team_member"
ROLE_CLIENT = "client"


@dataclass
class SeedUser:
    """One account to (re)create through the auth admin API."""

    email: str
    password: str = field(repr=False)
    role: str
    first_name: str
    last_name: str
    # Extra columns for client_profiles (clients only)
    company: dict[str, Any] = field(default_factory=dict)

    @property
    def is_client(self) -> bool:
        return self.role == ROLE_CLIENT

    @property
    def user_metadata(self) -> dict[str, Any]:
        return {
            "first_name": self.first_name,
            "last_name": self.last_name,
            "role": self.role,
        }


DEMO_ACCOUNTS = [
    {
        "email": "admin@demo.com",
        "role": ROLE_ADMIN,
        "first_name": "Alex",
        "last_name": "Admin",
    },
    {
        "email": "team@demo.com",
        "role": ROLE_TEAM,
        "first_name": "Taylor",
        "last_name": "Team",
    },
    {
        "email": "sarah@acmecorp.com",
        "role": ROLE_CLIENT,
        "first_name": "Sarah",
        "last_name": "Johnson",
        "company": {
            "company_name": "Acme Corporation",
            "industry": "Technology",
            "company_size": "50-100 employees",
            "annual_revenue": "$5M-$10M",
            "website": "https://acmecorp.com",
            "phone": "+1 (555) 123-4567",
        },
    },
    {
        "email": "mike@techstartup.co",
        "role": ROLE_CLIENT,
        "first_name": "Mike",
        "last_name": "Chen",
        "company": {
            "company_name": "TechStartup Co",
            "industry": "Software",
            "company_size": "10-50 employees",
            "annual_revenue": "$1M-$5M",
            "website": "https://techstartup.co",
            "phone": "+1 (555) 987-6543",
        },
    },
    {
        "email": "lisa@retailplus.com",
        "role": ROLE_CLIENT,
        "first_name": "Lisa",
        "last_name": "Rodriguez",
        "company": {
            "company_name": "RetailPlus Inc",
            "industry": "Retail",
            "company_size": "100-500 employees",
            "annual_revenue": "$10M-$50M",
            "website": "https://retailplus.com",
            "phone": "+1 (555) 456-7890",
        },
    },
]


def demo_users(password: str) -> list[SeedUser]:
    """The demo accounts, all sharing ``password``."""
    return [SeedUser(password=password, **account) for account in DEMO_ACCOUNTS]


# Knowledge base: collections and the resources placed in each one
KNOWLEDGE_COLLECTIONS = [
    {
        "name": "Getting Started",
        "description": "Essential resources for new clients and team members",
        "icon": "folder",
        "color": "blue",
        "visibility": "public",
        "resources": [
            {
                "title": "Welcome Guide",
                "description": "Getting started with AgencyOS platform",
                "content": "Welcome to AgencyOS! This guide walks through the key features.",
                "resource_type": "note",
            },
            {
                "title": "Platform Overview Video",
                "description": "Video walkthrough of main features",
                "url": "https://example.com/video",
                "resource_type": "link",
            },
        ],
    },
    {
        "name": "Project Templates",
        "description": "Reusable templates and best practices for projects",
        "icon": "file",
        "color": "green",
        "visibility": "team",
        "resources": [
            {
                "title": "Website Development Template",
                "description": "Standard website project workflow",
                "content": "Covers the website development lifecycle from discovery to launch.",
                "resource_type": "note",
            },
        ],
    },
    {
        "name": "Client Resources",
        "description": "Resources and documentation shared with clients",
        "icon": "link",
        "color": "purple",
        "visibility": "public",
        "resources": [
            {
                "title": "Client Onboarding Checklist",
                "description": "Steps for successful client onboarding",
                "content": "Follow these steps to ensure smooth client onboarding.",
                "resource_type": "note",
            },
        ],
    },
]

# Tables the application expects to exist
EXPECTED_TABLES = [
    "profiles",
    "client_profiles",
    "services",
    "milestones",
    "tasks",
    "conversations",
    "messages",
    "collections",
    "resources",
    "service_templates",
]

COLLECTIONS_TABLE = "collections"
RESOURCES_TABLE = "resources"

DEFAULT_ATTACHMENTS_BUCKET = "chat-attachments"
