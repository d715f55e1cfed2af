"""Supabase admin client factory."""

from __future__ import annotations

import logging

from supabase import Client, ClientOptions, create_client

from agencyos_qa.config import BackendSettings, mask_secret

logger = logging.getLogger(__name__)


def create_admin_client(settings: BackendSettings) -> Client:
    """
    Create a service-role client.

    Sessions are neither persisted nor refreshed: every command is a
    short-lived, single-shot process.
    """
    logger.info(f"Connecting to {settings.url} (key {mask_secret(settings.service_key)})")
    return create_client(
        settings.url,
        settings.service_key,
        options=ClientOptions(auto_refresh_token=False, persist_session=False),
    )
