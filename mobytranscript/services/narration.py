import requests

ELEVENLABS_TTS_URL = 'https://api.elevenlabs.io/v1/text-to-speech/{voice_id}'
VOICE_SETTINGS = {'stability': 0.4, 'similarity_boost': 0.8}


class NarrationNotConfigured(Exception):
    pass


class NarrationError(Exception):
    pass


def synthesize(text: str, voice_id: str, api_key: str, model_id: str = 'eleven_multilingual_v2',
               session=None, timeout=None) -> bytes:
    """Return MP3 bytes for ``text`` spoken by ElevenLabs voice ``voice_id``.

    No chunking or caching: one request per call.
    """
    if not api_key:
        raise NarrationNotConfigured("Configure the ElevenLabs API key (ELEVENLABS_API_KEY)")

    http = session or requests
    try:
        r = http.post(
            ELEVENLABS_TTS_URL.format(voice_id=voice_id),
            headers={
                'xi-api-key': api_key,
                'Accept': 'audio/mpeg',
                'Content-Type': 'application/json',
            },
            json={'text': text, 'model_id': model_id, 'voice_settings': VOICE_SETTINGS},
            timeout=timeout,
        )
    except requests.RequestException as e:
        raise NarrationError(f"ElevenLabs request failed: {e}")

    if not r.ok:
        raise NarrationError(f"ElevenLabs error: {r.text}")
    return r.content
