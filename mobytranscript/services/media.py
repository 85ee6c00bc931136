import requests
from flask import current_app

from .storage import download_bytes

USER_AGENT = 'MOBYTRANSCRIPT/1.0'
DEFAULT_CONTENT_TYPE = 'audio/mpeg'


class MediaError(Exception):
    pass


class MediaUnavailableError(MediaError):
    """The project has no usable media source."""


class UnsupportedMediaError(MediaError):
    """The linked URL does not serve audio or video."""


class MediaFetchError(MediaError):
    """Reading the stored file or downloading the URL failed."""


def is_media_type(content_type):
    ct = (content_type or '').lower()
    return ct.startswith('audio/') or ct.startswith('video/')


def fetch_url(url, session=None, timeout=120):
    http = session or requests
    try:
        r = http.get(url, headers={'User-Agent': USER_AGENT}, allow_redirects=True, stream=True, timeout=timeout)
    except requests.RequestException as e:
        raise MediaFetchError(f"could not download {url}: {e}")
    try:
        if not r.ok:
            raise MediaFetchError(f"URL returned status {r.status_code}")
        content_type = r.headers.get('Content-Type') or DEFAULT_CONTENT_TYPE
        # reject before pulling the body down
        if not is_media_type(content_type):
            raise UnsupportedMediaError("URL is not a direct media file. Upload the file or use a direct link.")
        return r.content, content_type
    finally:
        r.close()


def resolve_media(project, session=None):
    """Return ``(audio_bytes, content_type)`` for a project's source."""
    if project.source_type == 'upload' and project.file_url:
        try:
            audio = download_bytes(project.file_url)
        except Exception as e:
            current_app.logger.exception('Reading stored file for project %s failed', project.id)
            raise MediaFetchError("file not found in storage") from e
        return audio, project.file_mime or DEFAULT_CONTENT_TYPE
    if project.source_type == 'url' and project.source_url:
        return fetch_url(project.source_url, session=session)
    raise MediaUnavailableError("media source not available")
