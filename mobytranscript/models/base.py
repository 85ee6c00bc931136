from datetime import datetime, timezone

from ..extensions import db

class OwnerScopedMixin:
    user_id = db.Column(db.String(64), nullable=False, index=True)

    @classmethod
    def owned_by(cls, user_id):
        return cls.query.filter_by(user_id=str(user_id))

class TimestampMixin:
    created_at = db.Column(db.DateTime, server_default=db.func.now())
    updated_at = db.Column(db.DateTime, server_default=db.func.now(), onupdate=db.func.now())

    def touch(self):
        # onupdate only fires when some column changes; callers that must
        # always bump the timestamp set it explicitly
        self.updated_at = datetime.now(timezone.utc).replace(tzinfo=None)
