import threading
from contextlib import contextmanager

from flask_sqlalchemy import SQLAlchemy
from flask_login import LoginManager
from flask_migrate import Migrate
from redis import Redis
from redis.exceptions import LockError
from flask import current_app


class TranscriptionInProgress(Exception):
    """Another request already holds the transcription lock for a project."""


class ProjectLocks:
    """Single-flight guard for per-project transcription.

    Uses a Redis lock when REDIS_URL is configured so that several workers
    share it; otherwise a process-local set of held names is used.
    """

    def __init__(self):
        self.redis = None
        self.timeout = 300
        self._guard = threading.Lock()
        self._held = set()

    def init_app(self, app):
        self.timeout = app.config.get("TRANSCRIBE_LOCK_TIMEOUT", 300)
        url = app.config.get("REDIS_URL")
        self.redis = Redis.from_url(url) if url else None
        self._held = set()

    @contextmanager
    def hold(self, project_id):
        name = f"mobytranscript:transcribe:{project_id}"
        if self.redis is not None:
            lock = self.redis.lock(name, timeout=self.timeout, blocking=False)
            if not lock.acquire(blocking=False):
                raise TranscriptionInProgress(project_id)
            try:
                yield
            finally:
                try:
                    lock.release()
                except LockError:
                    # lock expired while the request was still running
                    current_app.logger.warning('transcription lock for project %s expired before release', project_id)
            return

        with self._guard:
            if name in self._held:
                raise TranscriptionInProgress(project_id)
            self._held.add(name)
        try:
            yield
        finally:
            with self._guard:
                self._held.discard(name)


db = SQLAlchemy()
login_manager = LoginManager()
migrate = Migrate()
project_locks = ProjectLocks()
