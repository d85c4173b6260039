"""Capabilities granted by the host to workflows."""

from __future__ import annotations

from datetime import datetime

from ..extensions import db


class GrantedCapability(db.Model):
    """A runtime capability the host has granted."""

    __tablename__ = "granted_capabilities"

    name = db.Column(db.String(64), primary_key=True)
    granted_at = db.Column(db.DateTime, default=datetime.utcnow, nullable=False)

    def __repr__(self) -> str:
        return f"<GrantedCapability {self.name}>"
