from ..extensions import db
from .base import OwnerScopedMixin, TimestampMixin

SOURCE_TYPES = ("upload", "url")


class Project(db.Model, OwnerScopedMixin, TimestampMixin):
    __tablename__ = "projects"

    id = db.Column(db.Integer, primary_key=True)
    # OwnerScopedMixin: user_id
    title = db.Column(db.String(255), nullable=False)

    # upload -> file_* columns, url -> source_url
    source_type = db.Column(db.String(10), nullable=False)
    source_url = db.Column(db.Text, nullable=True)
    # relative storage key; file_url is where save_file put it and stays server-side
    file_key = db.Column(db.String(512), nullable=True)
    file_url = db.Column(db.String(1024), nullable=True)
    file_name = db.Column(db.String(255), nullable=True)
    file_size = db.Column(db.Integer, nullable=True)
    file_mime = db.Column(db.String(120), nullable=True)

    transcript_text = db.Column(db.Text, nullable=True)
    # AssemblyAI transcript id, used for native subtitle export
    transcript_id = db.Column(db.String(120), nullable=True)
    # assemblyai / openai / deepgram / failed
    provider_used = db.Column(db.String(20), nullable=True)
    last_error = db.Column(db.Text, nullable=True)

    def has_media(self):
        if self.source_type == "upload":
            return bool(self.file_url)
        return bool(self.source_url)

    def attach_file(self, key, url, name, size, mime):
        self.file_key = key
        self.file_url = url
        self.file_name = name
        self.file_size = size
        self.file_mime = mime
        self.touch()

    def record_success(self, result):
        self.transcript_text = result.text
        self.provider_used = result.provider
        self.transcript_id = result.transcript_id if result.provider == "assemblyai" else None
        self.last_error = None
        self.touch()

    def record_failure(self, message):
        # a failed attempt leaves any earlier transcript text in place but
        # drops the provider-native id, which no longer matches provider_used
        self.provider_used = "failed"
        self.transcript_id = None
        self.last_error = message
        self.touch()

    def record_error(self, message):
        self.last_error = message
        self.touch()

    def to_dict(self):
        return {
            "id": self.id,
            "user_id": self.user_id,
            "title": self.title,
            "source_type": self.source_type,
            "source_url": self.source_url,
            "file_key": self.file_key,
            "file_name": self.file_name,
            "file_size": self.file_size,
            "file_mime": self.file_mime,
            "transcript_text": self.transcript_text,
            "transcript_id": self.transcript_id,
            "provider_used": self.provider_used,
            "last_error": self.last_error,
            "created_at": self.created_at.isoformat() if self.created_at else None,
            "updated_at": self.updated_at.isoformat() if self.updated_at else None,
        }
