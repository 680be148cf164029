from __future__ import annotations

import logging
from dataclasses import replace

from autodetail.application.exceptions import NotFound, Unauthenticated
from autodetail.application.ports.document_store import USERS, DocumentStorePort
from autodetail.application.utils.validation import validate_profile
from autodetail.domain.entities.timestamps import utcnow
from autodetail.domain.entities.user import Identity, User, UserRole


class UserDirectory:
    """Maps verified identities onto internal user records."""

    def __init__(self, store: DocumentStorePort) -> None:
        self._store = store
        self._logger = logging.getLogger(__name__)

    def find_by_subject(self, subject: str) -> User | None:
        docs = self._store.find(USERS, subject=subject)
        return User.from_document(docs[0]) if docs else None

    def get(self, user_id: str) -> User | None:
        doc = self._store.get(USERS, user_id)
        return User.from_document(doc) if doc else None

    def resolve(self, identity: Identity | None) -> User | None:
        """Return the user for `identity`, registering a customer on first sight."""
        if identity is None or not identity.subject:
            return None
        with self._store.transaction():
            existing = self.find_by_subject(identity.subject)
            if existing is not None:
                return existing
            user = User(
                id="",
                subject=identity.subject,
                email=identity.email,
                name=identity.name,
                phone=identity.phone,
                role=UserRole.customer,
                created_at=utcnow(),
            )
            user_id = self._store.insert(USERS, user.to_document())
        self._logger.info("Registered new user", extra={"reason": f"subject={identity.subject}"})
        return replace(user, id=user_id)

    def current_user(self, identity: Identity | None) -> User:
        if identity is None or not identity.subject:
            raise Unauthenticated("Unauthorized")
        user = self.find_by_subject(identity.subject)
        if user is None:
            raise NotFound("User not found")
        return user

    def update_profile(self, actor: User | None, name: str | None = None, phone: str | None = None) -> User:
        if actor is None:
            raise Unauthenticated("Unauthorized")
        changes = {}
        if name is not None:
            changes["name"] = name
        if phone is not None:
            changes["phone"] = phone
        validate_profile(name, phone)
        if changes:
            self._store.patch(USERS, actor.id, changes)
        return replace(actor, **changes)

    def assign_role(self, user_id: str, role: UserRole, tenant_id: str | None = None) -> User:
        user = self.get(user_id)
        if user is None:
            raise NotFound(f"User {user_id} not found")
        self._store.patch(USERS, user_id, {"role": role.value, "tenant_id": tenant_id})
        return replace(user, role=role, tenant_id=tenant_id)
