"""Backend inspection and seeding through the Supabase admin client.

Every operation returns ``Outcome`` records instead of raising: a
failure is logged with the underlying message and isolated to the item
it concerns, so batch operations always report on every item.
"""

from __future__ import annotations

import logging
import uuid
from typing import Any, Iterable, Optional, Union

import httpx

from agencyos_qa.backend.fixtures import (
    COLLECTIONS_TABLE,
    KNOWLEDGE_COLLECTIONS,
    RESOURCES_TABLE,
    SeedUser,
)
from agencyos_qa.testing.models.test_result import Outcome

logger = logging.getLogger(__name__)

PROFILES_TABLE = "profiles"
CLIENT_PROFILES_TABLE = "client_profiles"


class BackendInspector:
    """
    Read-mostly helper around a service-role Supabase client.

    The client is owned by one command run; nothing here is shared
    between processes.
    """

    def __init__(self, client, page_size: int = 1000):
        self.client = client
        self.page_size = page_size

    # -------------------------------------------------------------------------
    # Tables
    # -------------------------------------------------------------------------

    def table_exists(self, name: str) -> bool:
        """A bounded read that succeeds means the table exists."""
        try:
            self.client.table(name).select("*").limit(1).execute()
        except Exception as e:
            logger.info(f"Table '{name}' not readable: {e}")
            return False
        return True

    def check_tables(self, names: Iterable[str]) -> list[Outcome]:
        outcomes = []
        for name in names:
            exists = self.table_exists(name)
            outcomes.append(Outcome(
                label=f"table {name}",
                ok=exists,
                detail="exists" if exists else "missing or not readable",
            ))
        return outcomes

    # -------------------------------------------------------------------------
    # Users
    # -------------------------------------------------------------------------

    def list_user_ids_by_email(self) -> dict[str, str]:
        """Map lower-cased email to auth user id, walking every page."""
        users: dict[str, str] = {}
        page = 1
        while True:
            batch = self.client.auth.admin.list_users(page=page, per_page=self.page_size)
            for user in batch:
                if user.email:
                    users[user.email.lower()] = user.id
            if len(batch) < self.page_size:
                return users
            page += 1

    def seed_users(self, users: list[SeedUser]) -> list[Outcome]:
        """
        Delete-then-recreate each user by email.

        Returns one outcome per requested user, in input order. A
        duplicate email within the batch is reported as a conflict and
        skipped; any backend error affects only its own user.
        """
        try:
            existing = self.list_user_ids_by_email()
        except Exception as e:
            logger.error(f"Could not list auth users: {e}")
            return [
                Outcome(f"seed {user.email}", False, f"could not list existing users: {e}")
                for user in users
            ]

        outcomes = []
        seen: set[str] = set()

        for user in users:
            label = f"seed {user.email}"
            email = user.email.lower()

            if email in seen:
                logger.warning(f"Duplicate email in batch: {user.email}")
                outcomes.append(Outcome(label, False, "duplicate email in batch"))
                continue
            seen.add(email)

            try:
                user_id = self._recreate_user(user, existing.get(email))
                self._upsert_profiles(user_id, user)
            except Exception as e:
                logger.error(f"Seeding {user.email} failed: {e}")
                outcomes.append(Outcome(label, False, str(e)))
                continue

            logger.info(f"Seeded {user.role} {user.email}")
            outcomes.append(Outcome(label, True, f"{user.role} {user_id}"))

        return outcomes

    def _recreate_user(self, user: SeedUser, existing_id: Optional[str]) -> str:
        if existing_id:
            logger.info(f"Deleting existing user {user.email}")
            self.client.auth.admin.delete_user(existing_id)

        response = self.client.auth.admin.create_user({
            "email": user.email,
            "password": user.password,
            "email_confirm": True,
            "user_metadata": user.user_metadata,
        })
        if response is None or response.user is None:
            raise RuntimeError("create_user returned no user")
        return response.user.id

    def _upsert_profiles(self, user_id: str, user: SeedUser) -> None:
        self.client.table(PROFILES_TABLE).upsert({
            "id": user_id,
            "email": user.email,
            "first_name": user.first_name,
            "last_name": user.last_name,
            "role": user.role,
        }).execute()

        if user.is_client and user.company:
            self.client.table(CLIENT_PROFILES_TABLE).upsert(
                {"profile_id": user_id, **user.company},
                on_conflict="profile_id",
            ).execute()

    # -------------------------------------------------------------------------
    # Storage
    # -------------------------------------------------------------------------

    def bucket_exists(self, name: str) -> Outcome:
        label = f"bucket {name}"
        try:
            buckets = self.client.storage.list_buckets()
        except Exception as e:
            logger.error(f"Could not list buckets: {e}")
            return Outcome(label, False, f"could not list buckets: {e}")

        for bucket in buckets:
            if bucket.name == name:
                visibility = "public" if getattr(bucket, "public", False) else "private"
                return Outcome(label, True, visibility)

        available = ", ".join(sorted(b.name for b in buckets)) or "none"
        return Outcome(label, False, f"not found (available: {available})")

    def verify_storage_policy(
        self,
        bucket: str,
        payload: Union[str, bytes],
        prefix: str = "test",
        content_type: str = "text/plain",
        fetch_public_url: bool = False,
    ) -> Outcome:
        """
        Upload a literal object, resolve its public URL, then delete it.

        Success requires all three sub-steps and the object's key to be
        absent from the folder listing afterwards. Once the upload has
        succeeded, deletion is attempted whatever happens in between.
        """
        label = f"storage round trip {bucket}"
        name = f"verification-{uuid.uuid4().hex}.txt"
        key = f"{prefix.strip('/')}/{name}" if prefix else name
        data = payload.encode("utf-8") if isinstance(payload, str) else payload
        objects = self.client.storage.from_(bucket)

        try:
            objects.upload(key, data, {"content-type": content_type, "cache-control": "3600"})
        except Exception as e:
            logger.error(f"Upload to {bucket}/{key} failed: {e}")
            return Outcome(label, False, f"upload failed: {e}")

        failures = []

        try:
            public_url = objects.get_public_url(key)
            if not public_url:
                failures.append("empty public URL")
            elif fetch_public_url:
                self._fetch(public_url)
        except Exception as e:
            logger.error(f"Public URL check for {bucket}/{key} failed: {e}")
            failures.append(f"public URL failed: {e}")

        try:
            removed = objects.remove([key])
        except Exception as e:
            logger.error(f"Removing {bucket}/{key} failed: {e}")
            failures.append(f"delete failed: {e}")
        else:
            # A denied delete comes back as an empty list, not an error
            if not any(entry.get("name") == key for entry in removed or []):
                logger.error(f"Removing {bucket}/{key} deleted nothing")
                failures.append("delete failed: no object removed")
            if self._object_listed(objects, prefix, name):
                failures.append(f"{key} still listed after delete")

        if failures:
            return Outcome(label, False, "; ".join(failures))
        return Outcome(label, True, f"uploaded, resolved and removed {key}")

    @staticmethod
    def _fetch(url: str) -> None:
        response = httpx.get(url, timeout=10.0, follow_redirects=True)
        response.raise_for_status()

    def _object_listed(self, objects, prefix: str, name: str) -> bool:
        """Search the folder for ``name``, walking every page of the listing."""
        folder = prefix.strip("/") if prefix else ""
        offset = 0
        while True:
            options = {"search": name, "limit": self.page_size, "offset": offset}
            try:
                listing = objects.list(folder, options) or []
            except Exception as e:
                logger.warning(f"Could not list storage folder '{folder}': {e}")
                return True
            if any(entry.get("name") == name for entry in listing):
                return True
            if len(listing) < self.page_size:
                return False
            offset += len(listing)

    # -------------------------------------------------------------------------
    # Knowledge base
    # -------------------------------------------------------------------------

    def find_profile_id(self, email: str) -> Optional[str]:
        response = (
            self.client.table(PROFILES_TABLE)
            .select("id")
            .eq("email", email)
            .limit(1)
            .execute()
        )
        rows = response.data or []
        return rows[0]["id"] if rows else None

    def seed_knowledge_collections(
        self,
        owner_email: str,
        collections: Optional[list[dict[str, Any]]] = None,
    ) -> list[Outcome]:
        """Insert sample collections and their resources, owned by ``owner_email``."""
        collections = KNOWLEDGE_COLLECTIONS if collections is None else collections

        try:
            owner_id = self.find_profile_id(owner_email)
        except Exception as e:
            logger.error(f"Looking up {owner_email} failed: {e}")
            return [Outcome(f"collection {c['name']}", False, f"owner lookup failed: {e}") for c in collections]

        if owner_id is None:
            return [Outcome(f"collection {c['name']}", False, f"no profile for {owner_email}") for c in collections]

        outcomes = []
        for collection in collections:
            label = f"collection {collection['name']}"
            row = {k: v for k, v in collection.items() if k != "resources"}
            resources = collection.get("resources", [])
            try:
                inserted = self.client.table(COLLECTIONS_TABLE).insert({**row, "created_by": owner_id}).execute()
                collection_id = inserted.data[0]["id"]
                if resources:
                    self.client.table(RESOURCES_TABLE).insert([
                        {**resource, "collection_id": collection_id, "created_by": owner_id}
                        for resource in resources
                    ]).execute()
            except Exception as e:
                logger.error(f"Seeding {label} failed: {e}")
                outcomes.append(Outcome(label, False, str(e)))
                continue

            outcomes.append(Outcome(label, True, f"{len(resources)} resources"))
        return outcomes
