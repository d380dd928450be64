from datetime import datetime

from ..extensions import db


class StoredCollection(db.Model):
    __tablename__ = "stored_collections"

    name = db.Column(db.String(64), primary_key=True)  # patients | reference_templates
    payload = db.Column(db.JSON, nullable=False, default=list)
    updated_at = db.Column(
        db.DateTime,
        nullable=False,
        default=datetime.utcnow,
        onupdate=datetime.utcnow,
    )
