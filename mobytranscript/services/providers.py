"""Speech-to-text providers used by the transcription fallback chain.

Each provider wraps one vendor's REST API with `requests` and exposes the
same two calls: ``is_configured()`` and ``transcribe(audio, content_type)``.
Every failure, whether HTTP, network or an unexpected payload, surfaces as
``ProviderError`` so the orchestrator can move on to the next vendor.
"""

import threading
from dataclasses import dataclass
from typing import Optional

import requests

ASSEMBLYAI_BASE = 'https://api.assemblyai.com/v2'
OPENAI_TRANSCRIPTIONS_URL = 'https://api.openai.com/v1/audio/transcriptions'
DEEPGRAM_LISTEN_URL = 'https://api.deepgram.com/v1/listen'

PENDING_STATUSES = ('queued', 'processing')

# filename extension sent to Whisper, which sniffs the format from it
_WHISPER_EXTENSIONS = {
    'audio/mpeg': 'mp3',
    'audio/mp3': 'mp3',
    'audio/mp4': 'm4a',
    'audio/x-m4a': 'm4a',
    'audio/wav': 'wav',
    'audio/x-wav': 'wav',
    'audio/webm': 'webm',
    'audio/ogg': 'ogg',
    'audio/flac': 'flac',
    'video/mp4': 'mp4',
    'video/mpeg': 'mpeg',
    'video/webm': 'webm',
}


@dataclass
class TranscriptResult:
    text: str
    provider: str
    transcript_id: Optional[str] = None

    def to_dict(self):
        out = {'text': self.text, 'provider_used': self.provider}
        if self.transcript_id:
            out['transcript_id'] = self.transcript_id
        return out


class ProviderError(Exception):
    """A single provider failed; the caller may try the next one."""

    def __init__(self, provider, message):
        super().__init__(f"{provider}: {message}")
        self.provider = provider
        self.message = message


class TranscriptionProvider:
    """Base class for speech-to-text vendors."""

    name = 'base'

    def __init__(self, api_key: Optional[str], language: Optional[str] = None, session=None, timeout=None):
        self.api_key = api_key
        self.language = language
        self.session = session or requests.Session()
        # None means no client-side timeout, matching the upstream behaviour
        self.timeout = timeout

    def is_configured(self) -> bool:
        return bool(self.api_key)

    def transcribe(self, audio: bytes, content_type: str) -> TranscriptResult:
        raise NotImplementedError

    def _fail(self, message):
        return ProviderError(self.name, message)

    def _json(self, response):
        try:
            return response.json()
        except ValueError:
            raise self._fail(f"invalid JSON response (HTTP {response.status_code})")


class AssemblyAIProvider(TranscriptionProvider):
    """Primary provider: upload, submit a job, poll until it settles."""

    name = 'assemblyai'

    def __init__(self, api_key, language='pt', session=None, timeout=None,
                 poll_interval=2.0, max_polls=60, cancel_event=None):
        super().__init__(api_key, language=language, session=session, timeout=timeout)
        self.poll_interval = poll_interval
        self.max_polls = max_polls
        self.cancel_event = cancel_event or threading.Event()

    @property
    def _headers(self):
        return {'Authorization': self.api_key}

    def _upload(self, audio):
        r = self.session.post(f"{ASSEMBLYAI_BASE}/upload", headers=self._headers, data=audio, timeout=self.timeout)
        if not r.ok:
            raise self._fail(f"upload failed: HTTP {r.status_code}")
        upload_url = self._json(r).get('upload_url')
        if not upload_url:
            raise self._fail("upload response carried no upload_url")
        return upload_url

    def _submit(self, upload_url):
        body = {'audio_url': upload_url}
        if self.language:
            body['language_code'] = self.language
        r = self.session.post(f"{ASSEMBLYAI_BASE}/transcript", headers=self._headers, json=body, timeout=self.timeout)
        if not r.ok:
            raise self._fail(f"job submission failed: HTTP {r.status_code}")
        job_id = self._json(r).get('id')
        if not job_id:
            raise self._fail("job submission returned no id")
        return job_id

    def _poll(self, job_id):
        """Poll the job until it leaves queued/processing or the budget runs out."""
        status = 'queued'
        attempts = 0
        while status in PENDING_STATUSES:
            if attempts >= self.max_polls:
                raise self._fail(f"timed out waiting for transcript {job_id} after {attempts} polls")
            # Event.wait returns True only when cancelled
            if self.cancel_event.wait(self.poll_interval):
                raise self._fail("polling cancelled")

            r = self.session.get(f"{ASSEMBLYAI_BASE}/transcript/{job_id}", headers=self._headers, timeout=self.timeout)
            data = self._json(r)
            status = data.get('status')

            if status == 'completed':
                return data.get('text') or ''
            if status == 'error':
                raise self._fail(data.get('error') or 'transcription error')
            attempts += 1

        raise self._fail(f"unexpected job status {status!r}")

    def transcribe(self, audio, content_type):
        try:
            upload_url = self._upload(audio)
            job_id = self._submit(upload_url)
            text = self._poll(job_id)
        except requests.RequestException as e:
            raise self._fail(f"request failed: {e}")
        return TranscriptResult(text=text, provider=self.name, transcript_id=job_id)


class OpenAIWhisperProvider(TranscriptionProvider):
    """Secondary provider: a single multipart request to Whisper."""

    name = 'openai'
    model = 'whisper-1'

    def transcribe(self, audio, content_type):
        ext = _WHISPER_EXTENSIONS.get((content_type or '').split(';')[0].strip().lower(), 'mp3')
        files = {'file': (f"audio.{ext}", audio, content_type or 'audio/mpeg')}
        data = {'model': self.model, 'response_format': 'json'}
        if self.language:
            data['language'] = self.language
        try:
            r = self.session.post(
                OPENAI_TRANSCRIPTIONS_URL,
                headers={'Authorization': f'Bearer {self.api_key}'},
                files=files,
                data=data,
                timeout=self.timeout,
            )
        except requests.RequestException as e:
            raise self._fail(f"request failed: {e}")
        if not r.ok:
            raise self._fail(f"HTTP {r.status_code}: {(r.text or '')[:500]}")
        text = self._json(r).get('text')
        if text is None:
            raise self._fail("response carried no text")
        return TranscriptResult(text=text, provider=self.name)


class DeepgramProvider(TranscriptionProvider):
    """Tertiary provider: raw bytes to /v1/listen with a language hint."""

    name = 'deepgram'

    def transcribe(self, audio, content_type):
        params = {'smart_format': 'true'}
        if self.language:
            params['language'] = self.language
        headers = {
            'Authorization': f'Token {self.api_key}',
            'Content-Type': content_type or 'audio/mpeg',
        }
        try:
            r = self.session.post(DEEPGRAM_LISTEN_URL, params=params, headers=headers, data=audio, timeout=self.timeout)
        except requests.RequestException as e:
            raise self._fail(f"request failed: {e}")
        if not r.ok:
            raise self._fail(f"HTTP {r.status_code}: {(r.text or '')[:500]}")
        jr = self._json(r)

        # Deepgram typical shape: {results: {channels: [{alternatives:[{transcript:...}]}]}}
        try:
            text = jr['results']['channels'][0]['alternatives'][0]['transcript']
        except (KeyError, IndexError, TypeError):
            raise self._fail("response carried no transcript")
        return TranscriptResult(text=text, provider=self.name)


def build_providers(config, session=None, cancel_event=None):
    """Return the providers in fallback order, built from explicit config values."""
    language = config.get('TRANSCRIBE_LANGUAGE')
    return [
        AssemblyAIProvider(
            config.get('ASSEMBLYAI_API_KEY'),
            language=language,
            session=session,
            poll_interval=config.get('ASSEMBLYAI_POLL_INTERVAL', 2.0),
            max_polls=config.get('ASSEMBLYAI_MAX_POLLS', 60),
            cancel_event=cancel_event,
        ),
        OpenAIWhisperProvider(config.get('OPENAI_API_KEY'), language=language, session=session),
        DeepgramProvider(config.get('DEEPGRAM_API_KEY'), language=config.get('DEEPGRAM_LANGUAGE'), session=session),
    ]
