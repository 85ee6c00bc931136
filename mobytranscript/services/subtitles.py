"""SRT / WebVTT export.

AssemblyAI can render subtitles for its own transcripts; when that is not
possible the cues are estimated from the stored transcript text, one cue per
sentence with a duration proportional to its length.
"""

import re
from dataclasses import dataclass
from typing import List

import requests

from .providers import ASSEMBLYAI_BASE

FORMATS = ('srt', 'vtt')
CONTENT_TYPES = {'srt': 'application/x-subrip', 'vtt': 'text/vtt'}

CHARS_PER_SECOND = 20
MIN_CUE_SECONDS = 2
MAX_CUE_SECONDS = 5

# a run of non-terminators closed by terminators, or a trailing fragment
_SENTENCE_RE = re.compile(r'[^.!?]+[.!?]+|[^.!?]+$')


class SubtitlesUnavailable(Exception):
    pass


@dataclass
class Cue:
    start: float
    end: float
    text: str


def format_timestamp(seconds: float, fmt: str) -> str:
    total_ms = int(round(max(seconds, 0) * 1000))
    hours, rem = divmod(total_ms, 3600 * 1000)
    minutes, rem = divmod(rem, 60 * 1000)
    secs, ms = divmod(rem, 1000)
    sep = ',' if fmt == 'srt' else '.'
    return f"{hours:02d}:{minutes:02d}:{secs:02d}{sep}{ms:03d}"


def split_sentences(text: str) -> List[str]:
    if not text or not text.strip():
        return []
    sentences = [s for s in _SENTENCE_RE.findall(text) if s.strip()]
    return sentences or [text]


def cue_duration(sentence: str) -> float:
    return max(MIN_CUE_SECONDS, min(MAX_CUE_SECONDS, len(sentence) / CHARS_PER_SECOND))


def build_cues(text: str) -> List[Cue]:
    cues = []
    start = 0.0
    for sentence in split_sentences(text):
        end = start + cue_duration(sentence)
        cues.append(Cue(start=start, end=end, text=sentence.strip()))
        start = end
    return cues


def render(cues, fmt):
    if fmt not in FORMATS:
        raise ValueError(f"unsupported subtitle format: {fmt}")
    out = ['WEBVTT\n\n'] if fmt == 'vtt' else []
    for index, cue in enumerate(cues, start=1):
        if fmt == 'srt':
            out.append(f"{index}\n")
        out.append(f"{format_timestamp(cue.start, fmt)} --> {format_timestamp(cue.end, fmt)}\n")
        out.append(f"{cue.text}\n\n")
    return ''.join(out)


def fetch_provider_subtitles(transcript_id, fmt, api_key, session=None, timeout=30):
    """Fetch subtitles rendered by AssemblyAI; ``None`` when that is not possible."""
    http = session or requests
    r = http.get(f"{ASSEMBLYAI_BASE}/transcript/{transcript_id}/{fmt}",
                 headers={'Authorization': api_key}, timeout=timeout)
    if not r.ok:
        return None
    return r.text


def export_subtitles(fmt, project=None, transcript_id=None, api_key=None, session=None, logger=None):
    if fmt not in FORMATS:
        raise ValueError(f"unsupported subtitle format: {fmt}")

    if transcript_id and api_key:
        try:
            content = fetch_provider_subtitles(transcript_id, fmt, api_key, session=session)
        except requests.RequestException as e:
            content = None
            if logger:
                logger.warning('AssemblyAI subtitle export for %s failed: %s', transcript_id, e)
        if content:
            return content

    if project is not None and project.transcript_text:
        cues = build_cues(project.transcript_text)
        if cues:
            return render(cues, fmt)

    raise SubtitlesUnavailable("subtitles unavailable")
