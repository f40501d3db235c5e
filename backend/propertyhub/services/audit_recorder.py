"""Audit Recorder — persists INSERT / UPDATE / DELETE facts in the caller's transaction.

Invariants:
    - INSERT: old_value NULL, new_value = full record
    - UPDATE: old_value / new_value = changed keys only (core/audit_delta.py)
    - DELETE: old_value = full record, new_value NULL
    - Never commits: the row rides the caller's unit of work, so it commits or
      rolls back together with the mutation it describes
"""

from typing import Any, Mapping
from uuid import UUID

from sqlalchemy.ext.asyncio import AsyncSession

from propertyhub.core.audit_delta import build_update_values, jsonable
from propertyhub.core.domain_types import ActorContext, AuditOperation
from propertyhub.models.audit_log import AuditLog

_TABLES = {"Property": "properties", "User": "users"}


async def _write(
    db: AsyncSession,
    actor: ActorContext,
    operation: AuditOperation,
    entity_type: str,
    record_id: UUID,
    old_value: dict | None,
    new_value: dict | None,
) -> AuditLog:
    entry = AuditLog(
        user_id=actor.user_id,
        operation=operation.value,
        entity_type=entity_type,
        record_id=record_id,
        old_value=old_value,
        new_value=new_value,
        table_name=_TABLES.get(entity_type),
        ip_address=actor.ip_address,
        user_agent=actor.user_agent,
    )
    db.add(entry)
    await db.flush()
    return entry


async def record_insert(
    db: AsyncSession, actor: ActorContext, entity_type: str,
    record_id: UUID, new_record: Mapping[str, Any],
) -> AuditLog:
    return await _write(
        db, actor, AuditOperation.INSERT, entity_type, record_id,
        None, jsonable(dict(new_record)),
    )


async def record_update(
    db: AsyncSession,
    actor: ActorContext,
    entity_type: str,
    record_id: UUID,
    old_record: Mapping[str, Any],
    patch: Mapping[str, Any],
    extra_old: Mapping[str, Any] | None = None,
    extra_new: Mapping[str, Any] | None = None,
) -> AuditLog:
    """Delta of `patch` against `old_record`, plus caller-supplied extras."""
    old_values, new_values = build_update_values(old_record, patch)
    if extra_old:
        old_values.update(jsonable(dict(extra_old)))
    if extra_new:
        new_values.update(jsonable(dict(extra_new)))
    return await _write(
        db, actor, AuditOperation.UPDATE, entity_type, record_id,
        old_values, new_values,
    )


async def record_delete(
    db: AsyncSession, actor: ActorContext, entity_type: str,
    record_id: UUID, old_record: Mapping[str, Any],
) -> AuditLog:
    return await _write(
        db, actor, AuditOperation.DELETE, entity_type, record_id,
        jsonable(dict(old_record)), None,
    )
