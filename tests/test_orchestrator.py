from unittest.mock import Mock

import pytest

from mobytranscript.extensions import db
from mobytranscript.models.project import Project
from mobytranscript.services.orchestrator import (
    ALL_FAILED_MESSAGE,
    NONE_CONFIGURED_MESSAGE,
    TranscriptionFailed,
    TranscriptionOrchestrator,
    transcribe_project,
)
from mobytranscript.services.providers import AssemblyAIProvider, ProviderError, TranscriptResult


def _chain(fake_provider, primary=True, secondary=True, tertiary=True, **errors):
    return [
        fake_provider("assemblyai", configured=primary, error=errors.get("assemblyai"),
                      result=TranscriptResult("from aai", "assemblyai", "tr_1")),
        fake_provider("openai", configured=secondary, error=errors.get("openai"),
                      result=TranscriptResult("from whisper", "openai")),
        fake_provider("deepgram", configured=tertiary, error=errors.get("deepgram"),
                      result=TranscriptResult("from deepgram", "deepgram")),
    ]


def test_primary_success_stops_the_chain(fake_provider):
    providers = _chain(fake_provider)

    result = TranscriptionOrchestrator(providers).run(b"audio", "audio/mpeg")

    assert result.provider == "assemblyai"
    assert result.transcript_id == "tr_1"
    assert providers[1].calls == []
    assert providers[2].calls == []


def test_secondary_tried_first_when_primary_unconfigured(fake_provider):
    providers = _chain(fake_provider, primary=False)

    result = TranscriptionOrchestrator(providers).run(b"audio", "audio/mpeg")

    assert result.provider == "openai"
    assert providers[0].calls == []
    assert providers[1].calls == [(b"audio", "audio/mpeg")]


def test_tertiary_tried_when_first_two_unconfigured(fake_provider):
    providers = _chain(fake_provider, primary=False, secondary=False)

    result = TranscriptionOrchestrator(providers).run(b"audio", "audio/ogg")

    assert result.provider == "deepgram"
    assert providers[2].calls == [(b"audio", "audio/ogg")]


def test_none_configured_fails(fake_provider):
    providers = _chain(fake_provider, primary=False, secondary=False, tertiary=False)

    with pytest.raises(TranscriptionFailed) as exc:
        TranscriptionOrchestrator(providers).run(b"audio", "audio/mpeg")

    assert exc.value.message == NONE_CONFIGURED_MESSAGE
    assert exc.value.errors == {}


def test_every_provider_failing_is_aggregated(fake_provider):
    providers = _chain(
        fake_provider,
        assemblyai=ProviderError("assemblyai", "timed out"),
        openai=ProviderError("openai", "HTTP 500"),
        deepgram=RuntimeError("unexpected payload"),
    )

    with pytest.raises(TranscriptionFailed) as exc:
        TranscriptionOrchestrator(providers).run(b"audio", "audio/mpeg")

    assert exc.value.message == ALL_FAILED_MESSAGE
    assert set(exc.value.errors) == {"assemblyai", "openai", "deepgram"}
    # each provider is attempted exactly once
    assert [len(p.calls) for p in providers] == [1, 1, 1]


def test_unexpected_exception_falls_through(fake_provider):
    providers = _chain(fake_provider, assemblyai=KeyError("id"))

    result = TranscriptionOrchestrator(providers).run(b"audio", "audio/mpeg")

    assert result.provider == "openai"


def test_poll_error_on_third_attempt_falls_through_to_secondary(make_response, fake_provider):
    session = Mock()
    session.post.side_effect = [
        make_response(json={"upload_url": "https://cdn.assemblyai.test/u"}),
        make_response(json={"id": "tr_9"}),
    ]
    session.get.side_effect = [
        make_response(json={"status": "queued"}),
        make_response(json={"status": "processing"}),
        make_response(json={"status": "error", "error": "corrupt"}),
    ]
    primary = AssemblyAIProvider("aai", session=session, poll_interval=0)
    secondary = fake_provider("openai", result=TranscriptResult("whisper text", "openai"))

    result = TranscriptionOrchestrator([primary, secondary]).run(b"audio", "audio/mpeg")

    assert result.provider == "openai"
    assert result.text == "whisper text"
    assert session.get.call_count == 3


def _project(**kwargs):
    p = Project(user_id="alice", title="Episode", source_type="upload",
                file_url="file:///tmp/a.mp3", file_mime="audio/mpeg", **kwargs)
    db.session.add(p)
    db.session.commit()
    return p


def test_transcribe_project_persists_success(app, fake_provider):
    p = _project(last_error="old failure")
    orchestrator = TranscriptionOrchestrator(_chain(fake_provider))

    result = transcribe_project(p, orchestrator, media_resolver=lambda project: (b"audio", "audio/mpeg"))

    db.session.refresh(p)
    assert result.provider == "assemblyai"
    assert p.transcript_text == "from aai"
    assert p.transcript_id == "tr_1"
    assert p.provider_used == "assemblyai"
    assert p.last_error is None


def test_transcribe_project_drops_transcript_id_for_fallback(app, fake_provider):
    p = _project(transcript_id="tr_old")
    orchestrator = TranscriptionOrchestrator(_chain(fake_provider, primary=False))

    transcribe_project(p, orchestrator, media_resolver=lambda project: (b"audio", "audio/mpeg"))

    db.session.refresh(p)
    assert p.provider_used == "openai"
    assert p.transcript_id is None


def test_transcribe_project_persists_failure(app, fake_provider):
    p = _project(transcript_id="tr_old")
    orchestrator = TranscriptionOrchestrator(_chain(fake_provider, primary=False, secondary=False, tertiary=False))

    with pytest.raises(TranscriptionFailed):
        transcribe_project(p, orchestrator, media_resolver=lambda project: (b"audio", "audio/mpeg"))

    db.session.refresh(p)
    assert p.provider_used == "failed"
    assert p.last_error == NONE_CONFIGURED_MESSAGE
    assert p.transcript_id is None
    assert p.updated_at is not None
