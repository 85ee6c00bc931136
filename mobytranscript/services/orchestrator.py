"""Transcription fallback chain.

Providers are tried in priority order. The first one that returns a
transcript wins; provider errors are logged and absorbed, and only total
exhaustion is reported to the caller.
"""

import logging

from ..extensions import db
from .media import resolve_media

ALL_FAILED_MESSAGE = 'All transcription providers failed. Check the API keys.'
NONE_CONFIGURED_MESSAGE = 'No transcription provider is configured. Set an API key.'


class TranscriptionFailed(Exception):
    def __init__(self, message, errors=None):
        super().__init__(message)
        self.message = message
        # provider name -> error message
        self.errors = errors or {}


class TranscriptionOrchestrator:
    def __init__(self, providers, logger=None):
        self.providers = list(providers)
        self.logger = logger or logging.getLogger(__name__)

    def configured(self):
        return [p for p in self.providers if p.is_configured()]

    def run(self, audio, content_type):
        errors = {}
        candidates = self.configured()
        for provider in candidates:
            try:
                self.logger.info('Transcribing with %s (%d bytes, %s)', provider.name, len(audio), content_type)
                result = provider.transcribe(audio, content_type)
            except Exception as e:
                # any single vendor failing is a soft fall-through
                self.logger.warning('%s failed: %s', provider.name, e)
                errors[provider.name] = str(e)
                continue
            self.logger.info('Transcript produced by %s (%d chars)', provider.name, len(result.text or ''))
            return result

        message = ALL_FAILED_MESSAGE if candidates else NONE_CONFIGURED_MESSAGE
        raise TranscriptionFailed(message, errors)


def transcribe_project(project, orchestrator, media_resolver=resolve_media):
    """Resolve the project's media, run the chain and persist the outcome once.

    Media errors propagate untouched so the caller can map them to a status.
    """
    audio, content_type = media_resolver(project)
    try:
        result = orchestrator.run(audio, content_type)
    except TranscriptionFailed as e:
        project.record_failure(e.message)
        db.session.commit()
        raise
    project.record_success(result)
    db.session.commit()
    return result
