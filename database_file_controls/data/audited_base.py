from database_file_controls import db
from datetime import datetime


class AuditedBase(db.Model):
    """Abstract base class for stored records with an audit trail"""

    __abstract__ = True

    id = db.Column(db.Integer, primary_key=True)
    created_at = db.Column(db.DateTime, default=datetime.utcnow)
    updated_at = db.Column(db.DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)
    modified_by = db.Column(db.String(255), nullable=True)  # username of the last editor
