import re
from types import SimpleNamespace
from unittest.mock import Mock

import pytest

from mobytranscript.services.subtitles import (
    SubtitlesUnavailable,
    build_cues,
    cue_duration,
    export_subtitles,
    format_timestamp,
    render,
    split_sentences,
)


@pytest.mark.parametrize("seconds,fmt,expected", [
    (0, "srt", "00:00:00,000"),
    (0, "vtt", "00:00:00.000"),
    (2.5, "srt", "00:00:02,500"),
    (3661.5, "vtt", "01:01:01.500"),
    (59.9999, "srt", "00:01:00,000"),
    (36000.042, "srt", "10:00:00,042"),
])
def test_format_timestamp(seconds, fmt, expected):
    assert format_timestamp(seconds, fmt) == expected


@pytest.mark.parametrize("length", [0, 1, 20, 39, 40, 60, 99, 100, 101, 5000])
def test_cue_duration_is_clamped(length):
    d = cue_duration("x" * length)
    assert 2 <= d <= 5


def test_cue_duration_scales_with_length():
    assert cue_duration("x" * 60) == 3.0


def test_split_sentences_on_terminal_punctuation():
    assert split_sentences("Hello world. How are you? Fine!") == ["Hello world.", " How are you?", " Fine!"]


def test_split_sentences_without_punctuation_is_one_sentence():
    assert split_sentences("no punctuation here") == ["no punctuation here"]


def test_split_sentences_keeps_trailing_fragment():
    assert split_sentences("First. and then some") == ["First.", " and then some"]


def test_split_sentences_empty():
    assert split_sentences("") == []
    assert split_sentences("   ") == []


def test_cues_start_where_previous_ended():
    long_sentence = "a" * 200 + "."
    cues = build_cues(long_sentence + " Short one.")
    assert cues[0].start == 0
    assert cues[0].end == 5
    assert cues[1].start == cues[0].end
    assert cues[1].text == "Short one."


def test_render_srt():
    out = render(build_cues("Hi there. Bye."), "srt")
    assert out == (
        "1\n00:00:00,000 --> 00:00:02,000\nHi there.\n\n"
        "2\n00:00:02,000 --> 00:00:04,000\nBye.\n\n"
    )


def test_render_vtt():
    out = render(build_cues("Hi there. Bye."), "vtt")
    assert out.startswith("WEBVTT\n\n")
    assert "00:00:00.000 --> 00:00:02.000\nHi there.\n\n" in out
    # no numeric indices in WebVTT cues
    assert "\n1\n" not in out


@pytest.mark.parametrize("fmt,sep", [("srt", ","), ("vtt", ".")])
def test_rendered_timestamps_are_zero_padded(fmt, sep):
    text = " ".join(f"Sentence number {i} is here." for i in range(30))
    out = render(build_cues(text), fmt)
    stamps = re.findall(r"(\S+) --> (\S+)", out)
    assert len(stamps) == 30
    pattern = re.compile(r"^\d{2}:\d{2}:\d{2}" + re.escape(sep) + r"\d{3}$")
    for start, end in stamps:
        assert pattern.match(start)
        assert pattern.match(end)


@pytest.mark.parametrize("fmt", ["srt", "vtt"])
def test_export_unavailable_without_text_or_id(fmt):
    with pytest.raises(SubtitlesUnavailable):
        export_subtitles(fmt, project=SimpleNamespace(transcript_text=None))
    with pytest.raises(SubtitlesUnavailable):
        export_subtitles(fmt, project=None, transcript_id=None, api_key="key")


def test_export_prefers_provider_subtitles(make_response):
    session = Mock()
    session.get.return_value = make_response(text="1\n00:00:00,000 --> 00:00:01,000\nnative\n\n")
    project = SimpleNamespace(transcript_text="Local text.")

    out = export_subtitles("srt", project=project, transcript_id="tr_1", api_key="key", session=session)

    assert "native" in out
    url = session.get.call_args[0][0]
    assert url.endswith("/v2/transcript/tr_1/srt")
    assert session.get.call_args[1]["headers"] == {"Authorization": "key"}


def test_export_falls_back_when_provider_fails(make_response):
    session = Mock()
    session.get.return_value = make_response(status=404)
    project = SimpleNamespace(transcript_text="Local text.")

    out = export_subtitles("vtt", project=project, transcript_id="tr_1", api_key="key", session=session)

    assert out.startswith("WEBVTT")
    assert "Local text." in out


def test_export_skips_provider_without_key():
    session = Mock()
    project = SimpleNamespace(transcript_text="Local text.")

    out = export_subtitles("srt", project=project, transcript_id="tr_1", api_key=None, session=session)

    session.get.assert_not_called()
    assert "Local text." in out


def test_render_rejects_unknown_format():
    with pytest.raises(ValueError):
        render([], "ass")
