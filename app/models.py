"""
Safety Points Database Models
Pure SQLAlchemy models with no HTTP dependencies.
Only used by the database blob backend.
"""

from datetime import datetime
from flask_sqlalchemy import SQLAlchemy

db = SQLAlchemy()


class BlobObject(db.Model):
    """
    One named object in the local blob store.
    Mirrors a remote blob: pathname, raw bytes and content type,
    overwritten wholesale on every put.
    """
    __tablename__ = 'blob_objects'

    id = db.Column(db.Integer, primary_key=True)
    pathname = db.Column(db.String(255), unique=True, nullable=False, index=True)

    content = db.Column(db.LargeBinary, nullable=False)
    content_type = db.Column(db.String(100), default='application/octet-stream')
    size = db.Column(db.Integer, default=0)

    # Timestamps
    created_at = db.Column(db.DateTime, default=datetime.utcnow)
    uploaded_at = db.Column(db.DateTime, default=datetime.utcnow)
