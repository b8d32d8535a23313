from __future__ import annotations

import uuid
from typing import Any, Dict

from sqlmodel import Session, select

from src.server.models import PricingSettingsRecord
from src.server.models.common import utcnow
from src.services.errors import ConfigurationMissing
from src.services.pricing_settings import (
    DEFAULT_SETTINGS,
    DEFAULT_SETTINGS_DOCUMENT,
    PricingSettings,
    parse_settings,
)


def _record_for(session: Session, organization_id: uuid.UUID):
    return session.exec(
        select(PricingSettingsRecord).where(
            PricingSettingsRecord.organization_id == organization_id
        )
    ).first()


def load_settings(session: Session, organization_id: uuid.UUID) -> PricingSettings:
    """
    Stored settings for an organization.

    Raises ConfigurationMissing when nothing is stored and InvalidInput when
    the stored document does not validate.
    """
    record = _record_for(session, organization_id)
    if record is None:
        raise ConfigurationMissing(f"No pricing settings for organization {organization_id}")
    return parse_settings(record.settings)


def settings_for(session: Session, organization_id: uuid.UUID) -> PricingSettings:
    """Stored settings, or DEFAULT_SETTINGS when the organization has none."""
    try:
        return load_settings(session, organization_id)
    except ConfigurationMissing:
        return DEFAULT_SETTINGS


def save_settings(
    session: Session,
    organization_id: uuid.UUID,
    document: Dict[str, Any],
) -> PricingSettings:
    """Validate and upsert the organization's settings document."""
    parsed = parse_settings(document)

    record = _record_for(session, organization_id)
    if record is None:
        record = PricingSettingsRecord(organization_id=organization_id)
    record.settings = parsed.to_document()
    record.updated_at = utcnow()

    session.add(record)
    session.commit()
    return parsed


def reset_settings(session: Session, organization_id: uuid.UUID) -> PricingSettings:
    return save_settings(session, organization_id, dict(DEFAULT_SETTINGS_DOCUMENT))
