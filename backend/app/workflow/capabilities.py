"""Capability host backed by the granted capabilities table."""

from __future__ import annotations

from collections.abc import Sequence

from sqlalchemy.exc import SQLAlchemyError

from ..extensions import db
from ..models.capability import GrantedCapability
from .errors import CapabilityQueryFailure


class CapabilityHost:
    """Answers capability queries from the persisted grants."""

    def has_capability(self, names: Sequence[str]) -> bool:
        wanted = set(names)
        if not wanted:
            return True
        try:
            granted = {
                row.name
                for row in GrantedCapability.query.filter(GrantedCapability.name.in_(wanted))
            }
        except SQLAlchemyError as exc:
            raise CapabilityQueryFailure(f"capability lookup failed: {exc}") from exc
        return wanted <= granted

    def granted(self) -> list[str]:
        return [row.name for row in GrantedCapability.query.order_by(GrantedCapability.name.asc())]

    def grant(self, name: str) -> bool:
        """Grant ``name``; return ``False`` when it was already granted."""

        if db.session.get(GrantedCapability, name) is not None:
            return False
        db.session.add(GrantedCapability(name=name))
        db.session.commit()
        return True

    def revoke(self, name: str) -> bool:
        capability = db.session.get(GrantedCapability, name)
        if capability is None:
            return False
        db.session.delete(capability)
        db.session.commit()
        return True
