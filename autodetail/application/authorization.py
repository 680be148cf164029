"""
Single authorization policy for every operation.

Use cases call `authorize(actor, action, resource)` on entry instead of
checking roles themselves.
"""

from __future__ import annotations

from collections.abc import Callable
from enum import Enum
from typing import Any

from autodetail.application.exceptions import InvariantViolation, Unauthenticated, Unauthorized
from autodetail.domain.entities.user import User, UserRole

TENANT_STAFF = {UserRole.tenant_owner, UserRole.tenant_admin}


class Action(str, Enum):
    service_manage = "service.manage"
    vehicle_create = "vehicle.create"
    vehicle_access = "vehicle.access"
    booking_create = "booking.create"
    booking_read = "booking.read"
    booking_list_all = "booking.list_all"
    booking_operate = "booking.operate"
    analytics_read = "analytics.read"
    tenant_create = "tenant.create"
    tenant_update = "tenant.update"
    tenant_read_private = "tenant.read_private"
    assessment_review = "assessment.review"
    maintenance_run = "maintenance.run"


def _is_admin(actor: User) -> bool:
    return actor.role == UserRole.admin


def _is_owner(actor: User, resource: Any) -> bool:
    return resource is not None and getattr(resource, "user_id", None) == actor.id


def _is_tenant_staff(actor: User, resource: Any) -> bool:
    if actor.role not in TENANT_STAFF or actor.tenant_id is None:
        return False
    if resource is None:
        return True
    tenant_id = getattr(resource, "tenant_id", None)
    if tenant_id is None and hasattr(resource, "slug"):
        tenant_id = getattr(resource, "id", None)
    return tenant_id == actor.tenant_id


def _any_user(actor: User, resource: Any) -> bool:
    return True


def _admin_or_staff(actor: User, resource: Any) -> bool:
    return _is_admin(actor) or _is_tenant_staff(actor, resource)


def _booking_reader(actor: User, resource: Any) -> bool:
    return (
        _is_owner(actor, resource)
        or _admin_or_staff(actor, resource)
        or (actor.role == UserRole.detailer and getattr(resource, "assigned_detailer_id", None) == actor.id)
    )


def _tenant_owner(actor: User, resource: Any) -> bool:
    return resource is not None and getattr(resource, "owner_subject", None) == actor.subject


POLICY: dict[Action, Callable[[User, Any], bool]] = {
    Action.service_manage: _admin_or_staff,
    Action.vehicle_create: _any_user,
    Action.vehicle_access: _is_owner,
    Action.booking_create: _any_user,
    Action.booking_read: _booking_reader,
    Action.booking_list_all: _admin_or_staff,
    Action.booking_operate: _admin_or_staff,
    Action.analytics_read: lambda actor, resource: _is_admin(actor),
    Action.tenant_create: _any_user,
    Action.tenant_update: _tenant_owner,
    Action.tenant_read_private: _admin_or_staff,
    Action.assessment_review: _admin_or_staff,
    Action.maintenance_run: lambda actor, resource: _is_admin(actor),
}

# Actions whose failure means "someone else's resource" rather than "missing role".
OWNERSHIP_ACTIONS = {Action.vehicle_access, Action.booking_read, Action.tenant_update}


def can_perform(actor: User | None, action: Action, resource: Any = None) -> bool:
    if actor is None:
        return False
    rule = POLICY.get(action)
    return bool(rule and rule(actor, resource))


def authorize(actor: User | None, action: Action, resource: Any = None) -> User:
    """Return the actor if allowed, otherwise raise Unauthorized (or InvariantViolation)."""
    if actor is None:
        raise Unauthenticated("Unauthorized")
    if not can_perform(actor, action, resource):
        if action in OWNERSHIP_ACTIONS:
            raise InvariantViolation(f"Unauthorized: {action.value} on a resource you do not own")
        raise Unauthorized(f"Unauthorized: {action.value} requires additional privileges")
    return actor
