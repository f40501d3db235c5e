"""Property Mutations — atomic create / update / assign / delete of the Property aggregate.

Invariants:
    - Input validation and ownership resolution happen before the transaction opens
    - Root row, amenity links, media, certifications, connectivity, the Sales
      assignment and the audit row are written in ONE unit of work
    - Any failure inside the unit of work rolls back every row written so far
    - Update/delete lookups are scoped to the actor (owner_id / broker_id);
      records outside that scope raise ResourceNotFoundError, never ForbiddenError
    - Protected fields are dropped from update patches and logged at WARNING
    - Amenity replacement is wholesale; the old set is read inside the same
      transaction and both sets go into the audit delta
    - Notifications fire only after commit, best-effort, never raising

Design Decisions:
    - Services receive the DatabaseSessionManager explicitly; the HTTP layer
      is only one caller
    - SELECT ... FOR UPDATE on the root row: concurrent updates of one
      listing serialize on the database's row lock
"""

import logging
from typing import Any, Mapping
from uuid import UUID

from sqlalchemy import select, delete
from sqlalchemy.ext.asyncio import AsyncSession

from propertyhub.config import Settings
from propertyhub.core.domain_types import ActorContext, NotificationEvent
from propertyhub.core.errors import ResourceNotFoundError, ValidationError
from propertyhub.core.property_rules import (
    DESCRIPTIVE_FIELDS,
    certification_rows,
    check_create_required,
    check_required_not_cleared,
    media_type_for,
    normalize_connectivity,
    ownership_for,
    ownership_scope,
    plan_update,
)
from propertyhub.core.repository_protocols import NotificationEmitter
from propertyhub.infrastructure.database import DatabaseSessionManager
from propertyhub.infrastructure.notifications import emit_safely, event_payload
from propertyhub.models.amenity import Amenity
from propertyhub.models.caretaker import Caretaker
from propertyhub.models.property import Property
from propertyhub.models.property_amenity import PropertyAmenity
from propertyhub.models.property_certification import PropertyCertification
from propertyhub.models.property_connectivity import PropertyConnectivity
from propertyhub.models.property_media import PropertyMedia
from propertyhub.services import audit_recorder
from propertyhub.services.assignment_balancer import (
    pick_sales_handler, require_assignable,
)
from propertyhub.services.property_queries import (
    PropertyAggregate, amenity_ids_for, load_aggregate,
)

logger = logging.getLogger(__name__)

ENTITY = "Property"


# ─── Child-record helpers (run inside the caller's unit of work) ─

def _unique_ids(ids: list[int] | None) -> list[int]:
    seen: list[int] = []
    for amenity_id in ids or []:
        if amenity_id not in seen:
            seen.append(amenity_id)
    return seen


async def _require_amenities(db: AsyncSession, amenity_ids: list[int]) -> None:
    """All ids must exist and be active; otherwise nothing is linked."""
    if not amenity_ids:
        return
    found = set((await db.execute(
        select(Amenity.amenity_id).where(
            Amenity.amenity_id.in_(amenity_ids), Amenity.is_active.is_(True),
        )
    )).scalars().all())
    invalid = [a for a in amenity_ids if a not in found]
    if invalid:
        raise ValidationError(
            f"Invalid or inactive amenity IDs: {invalid}", field="amenityIds",
        )


async def _require_caretaker(db: AsyncSession, caretaker_id: int | None) -> None:
    if caretaker_id is None:
        return
    caretaker = await db.get(Caretaker, caretaker_id)
    if caretaker is None or not caretaker.is_active:
        raise ValidationError(
            f"Invalid or inactive caretaker ID: {caretaker_id}", field="caretakerId",
        )


def _link_amenities(db: AsyncSession, property_id: UUID, amenity_ids: list[int]) -> None:
    for amenity_id in amenity_ids:
        db.add(PropertyAmenity(property_id=property_id, amenity_id=amenity_id))


def _add_media(
    db: AsyncSession, property_id: UUID, media: list[Mapping[str, Any]],
) -> int:
    for item in media:
        file_url = (item.get("file_url") or "").strip()
        if not file_url:
            raise ValidationError("Media entry is missing fileUrl", field="media")
        db.add(PropertyMedia(
            property_id=property_id,
            media_type=media_type_for(item.get("content_type")).value,
            file_url=file_url,
        ))
    return len(media)


async def _scoped_property(
    db: AsyncSession, actor: ActorContext, property_id: UUID,
    restrict_to_actor: bool = True,
) -> Property:
    """Active property visible to the actor, row-locked for the rest of the transaction."""
    query = select(Property).where(
        Property.property_id == property_id, Property.is_active.is_(True),
    )
    scope = ownership_scope(actor) if restrict_to_actor else None
    if scope is not None:
        column, user_id = scope
        query = query.where(getattr(Property, column) == user_id)
    prop = (await db.execute(query.with_for_update())).scalar_one_or_none()
    if prop is None:
        raise ResourceNotFoundError(
            ENTITY, str(property_id),
            message="Property not found or you don't have permission to modify it",
        )
    return prop


# ─── Create ─────────────────────────────────────────────────────

async def create_property(
    db_manager: DatabaseSessionManager,
    actor: ActorContext,
    payload: Mapping[str, Any],
    settings: Settings,
    emitter: NotificationEmitter | None = None,
) -> PropertyAggregate:
    """Insert a property with all child records, Sales assignment and audit row."""
    check_create_required(payload)
    ownership = ownership_for(actor)
    connectivity = normalize_connectivity(payload.get("connectivity_details"))
    certifications = certification_rows(payload.get("certifications"))
    amenity_ids = _unique_ids(payload.get("amenity_ids"))
    caretaker_id = payload.get("caretaker_id")
    media = list(payload.get("media") or [])
    fields = {k: payload[k] for k in DESCRIPTIVE_FIELDS if k in payload}

    async with db_manager.unit_of_work() as db:
        await _require_amenities(db, amenity_ids)
        await _require_caretaker(db, caretaker_id)
        sales_id = await pick_sales_handler(db, settings.sales_role_name)

        prop = Property(
            **fields, **ownership,
            caretaker_id=caretaker_id, sales_id=sales_id, is_active=True,
        )
        db.add(prop)
        await db.flush()

        _link_amenities(db, prop.property_id, amenity_ids)
        _add_media(db, prop.property_id, media)
        for cert_type, details in certifications:
            db.add(PropertyCertification(
                property_id=prop.property_id,
                certification_type=cert_type,
                certification_details=details,
            ))
        for row in connectivity:
            db.add(PropertyConnectivity(property_id=prop.property_id, **row))
        await db.flush()

        snapshot = prop.to_dict()
        snapshot["amenity_ids"] = amenity_ids
        await audit_recorder.record_insert(
            db, actor, ENTITY, prop.property_id, snapshot,
        )
        aggregate = await load_aggregate(db, prop.property_id)

    logger.info(
        "Property created",
        extra={"property_id": str(prop.property_id), "user_id": str(actor.user_id)},
    )
    await emit_safely(
        emitter, NotificationEvent.PROPERTY_CREATED,
        event_payload(prop.property_id, actor, salesId=sales_id),
    )
    return aggregate


# ─── Update ─────────────────────────────────────────────────────

async def update_property(
    db_manager: DatabaseSessionManager,
    actor: ActorContext,
    property_id: UUID,
    payload: Mapping[str, Any],
    emitter: NotificationEmitter | None = None,
) -> PropertyAggregate:
    """Apply allow-listed fields, replace amenities, append media, audit the delta."""
    plan = plan_update(payload)
    media = list(payload.get("media") or [])
    if plan.protected_attempted:
        logger.warning(
            f"Ignoring protected fields on property update: {plan.protected_attempted}",
            extra={
                "property_id": str(property_id),
                "user_id": str(actor.user_id),
                "fields": plan.protected_attempted,
            },
        )
    if plan.is_empty(len(media)):
        raise ValidationError("No fields to update")
    check_required_not_cleared(plan.field_updates)
    new_amenity_ids = (
        _unique_ids(plan.amenity_ids) if plan.amenity_ids is not None else None
    )

    async with db_manager.unit_of_work() as db:
        prop = await _scoped_property(db, actor, property_id)
        old = prop.to_dict()
        if plan.field_updates.get("caretaker_id") is not None:
            await _require_caretaker(db, plan.field_updates["caretaker_id"])

        extra_old: dict[str, Any] = {}
        extra_new: dict[str, Any] = {"updated_by": str(actor.user_id)}
        if new_amenity_ids is not None:
            await _require_amenities(db, new_amenity_ids)
            extra_old["amenity_ids"] = await amenity_ids_for(db, property_id)
            extra_new["amenity_ids"] = new_amenity_ids
            await db.execute(
                delete(PropertyAmenity)
                .where(PropertyAmenity.property_id == property_id)
            )
            _link_amenities(db, property_id, new_amenity_ids)

        for key, value in plan.field_updates.items():
            setattr(prop, key, value)
        if media:
            extra_new["media_added"] = _add_media(db, property_id, media)
        await db.flush()

        await audit_recorder.record_update(
            db, actor, ENTITY, property_id, old, plan.field_updates,
            extra_old=extra_old, extra_new=extra_new,
        )
        aggregate = await load_aggregate(db, property_id)

    await emit_safely(
        emitter, NotificationEvent.PROPERTY_UPDATED,
        event_payload(property_id, actor),
    )
    return aggregate


# ─── Assign / Delete ────────────────────────────────────────────

async def assign_property(
    db_manager: DatabaseSessionManager,
    actor: ActorContext,
    property_id: UUID,
    sales_user_id: UUID,
    emitter: NotificationEmitter | None = None,
) -> PropertyAggregate:
    """Overwrite the Sales handler. Gated by PROPERTY_ASSIGN, not by ownership."""
    async with db_manager.unit_of_work() as db:
        prop = await _scoped_property(db, actor, property_id, restrict_to_actor=False)
        await require_assignable(db, sales_user_id)
        old = prop.to_dict()
        prop.sales_id = sales_user_id
        await db.flush()
        await audit_recorder.record_update(
            db, actor, ENTITY, property_id, old, {"sales_id": sales_user_id},
            extra_new={"updated_by": str(actor.user_id)},
        )
        aggregate = await load_aggregate(db, property_id)

    await emit_safely(
        emitter, NotificationEvent.PROPERTY_ASSIGNED,
        event_payload(property_id, actor, salesId=str(sales_user_id)),
    )
    return aggregate


async def delete_property(
    db_manager: DatabaseSessionManager,
    actor: ActorContext,
    property_id: UUID,
    emitter: NotificationEmitter | None = None,
) -> None:
    """Soft delete; the audit row carries the full record as it was."""
    async with db_manager.unit_of_work() as db:
        prop = await _scoped_property(db, actor, property_id)
        old = prop.to_dict()
        old["amenity_ids"] = await amenity_ids_for(db, property_id)
        prop.is_active = False
        await db.flush()
        await audit_recorder.record_delete(db, actor, ENTITY, property_id, old)

    await emit_safely(
        emitter, NotificationEvent.PROPERTY_DELETED,
        event_payload(property_id, actor),
    )
