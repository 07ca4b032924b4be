"""Stage ordering, short-circuiting and cancellation of the assist flows."""

from __future__ import annotations

import asyncio
import base64
import json

import pytest

from conftest import FakeTranscriber, FakeUploader, build_fake_orchestrator
from langassist.exceptions import (
    InputError,
    PipelineCancelled,
    TranscriptionError,
    TranscriptionTimeoutError,
    UploadError,
)
from langassist.pipelines.assist import PipelineOrchestrator
from langassist.pipelines.assist.types import AssistRequest, AudioPayload, Flow

AUDIO = AudioPayload(data=b"\x00\x01fake-audio", mime_type="audio/webm")


def _practice_request(text: str = "hello world") -> AssistRequest:
    return AssistRequest(flow=Flow.PRACTICE_MODE, text=text, audio=AUDIO)


def test_practice_mode_returns_evaluation_unchanged(evaluator_reply: str) -> None:
    orchestrator, parts = build_fake_orchestrator(llm_replies=evaluator_reply, transcript="hello word")

    body = asyncio.run(orchestrator.run(_practice_request()))

    assert body == {
        "accuracy": "90%",
        "mistakes": [{"expected": "world", "said": "word", "feedback": "final consonant dropped"}],
        "feedback": "Good attempt",
        "score": "9/10",
    }
    assert parts["calls"] == ["upload", "transcribe", "llm"]
    assert parts["uploader"].uploads == [(AUDIO.data, "audio/webm")]
    assert parts["transcriber"].urls == ["https://bucket.example.com/uploads/a.mp3"]
    _, user_prompt = parts["llm"].prompts[0]
    assert user_prompt == "Text to pronounce: hello world\npronounced: hello word"


def test_practice_mode_falls_back_on_prose_reply() -> None:
    orchestrator, _ = build_fake_orchestrator(llm_replies="Nearly perfect, watch the final d.")

    body = asyncio.run(orchestrator.run(_practice_request()))

    assert body == {"feedback": "Nearly perfect, watch the final d.", "score": "N/A"}


def test_voice_assistant_runs_all_stages_in_order() -> None:
    orchestrator, parts = build_fake_orchestrator(llm_replies="Hi! How can I help you practise today?")
    request = AssistRequest(flow=Flow.VOICE_ASSISTANT, audio=AUDIO)

    body = asyncio.run(orchestrator.run(request))

    assert parts["calls"] == ["upload", "transcribe", "llm", "synthesize"]
    assert parts["synthesizer"].texts == ["Hi! How can I help you practise today?"]
    assert body["file"]["mimeType"] == "audio/mpeg"
    assert body["file"]["fileName"] == "response.mp3"
    assert base64.b64decode(body["file"]["data"]) == b"ID3-fake-mp3"


def test_voice_assistant_sends_transcript_to_conversational_role() -> None:
    orchestrator, parts = build_fake_orchestrator(transcript="how do I say thanks in Spanish")

    asyncio.run(orchestrator.run(AssistRequest(flow=Flow.VOICE_ASSISTANT, audio=AUDIO)))

    system_prompt, user_prompt = parts["llm"].prompts[0]
    assert user_prompt == "how do I say thanks in Spanish"
    assert system_prompt.startswith("You are a Professional Language Teaching Assistant.")


def test_text_assist_builds_prompt_and_unwraps_result() -> None:
    orchestrator, parts = build_fake_orchestrator(llm_replies='{"result":"Bonjour"}')
    request = AssistRequest(
        flow=Flow.TEXT_ASSIST,
        text="Hello",
        action="Translate",
        tone="Friendly",
        input_lang="English",
        target_lang="French",
    )

    body = asyncio.run(orchestrator.run(request))

    assert body == "Bonjour"
    assert parts["calls"] == ["llm"]
    system_prompt, user_prompt = parts["llm"].prompts[0]
    assert user_prompt == "Hello"
    for expected in ("Action: Translate", "Tone/Style: Friendly", "Target Language: French"):
        assert expected in system_prompt


def test_upload_failure_skips_every_later_stage() -> None:
    calls: list[str] = []
    orchestrator, _ = build_fake_orchestrator(uploader=FakeUploader(fail=True, calls=calls), calls=calls)

    with pytest.raises(UploadError):
        asyncio.run(orchestrator.run(_practice_request()))

    assert calls == ["upload"]


@pytest.mark.parametrize(
    "error",
    [
        TranscriptionError("Transcription failed: audio too short"),
        TranscriptionTimeoutError("Transcription timeout", attempts=30),
    ],
)
def test_transcription_failure_skips_processing(error: Exception) -> None:
    calls: list[str] = []
    transcriber = FakeTranscriber(error=error, calls=calls)
    orchestrator, _ = build_fake_orchestrator(transcriber=transcriber, calls=calls)

    with pytest.raises(type(error)):
        asyncio.run(orchestrator.run(AssistRequest(flow=Flow.VOICE_ASSISTANT, audio=AUDIO)))

    assert calls == ["upload", "transcribe"]


def test_audio_flow_without_audio_is_input_error() -> None:
    orchestrator, parts = build_fake_orchestrator()

    with pytest.raises(InputError):
        asyncio.run(orchestrator.run(AssistRequest(flow=Flow.PRACTICE_MODE, text="hello")))

    assert parts["calls"] == []


def test_cancellation_stops_at_next_stage_boundary() -> None:
    orchestrator, parts = build_fake_orchestrator()
    probes: list[str] = []

    async def disconnected_after_upload() -> bool:
        probes.append("probe")
        return "upload" in parts["calls"]

    with pytest.raises(PipelineCancelled) as excinfo:
        asyncio.run(
            orchestrator.run(
                AssistRequest(flow=Flow.VOICE_ASSISTANT, audio=AUDIO),
                is_cancelled=disconnected_after_upload,
            )
        )

    assert parts["calls"] == ["upload"]
    assert probes == ["probe", "probe"]
    assert excinfo.value.status_code == 499
    assert "Transcription" in excinfo.value.message


def test_connected_probe_does_not_change_result(evaluator_reply: str) -> None:
    orchestrator, _ = build_fake_orchestrator(llm_replies=evaluator_reply)

    async def connected() -> bool:
        return False

    body = asyncio.run(orchestrator.run(_practice_request(), is_cancelled=connected))

    assert body == json.loads(evaluator_reply)


def test_concurrent_runs_do_not_share_state() -> None:
    first, _ = build_fake_orchestrator(llm_replies='{"result":"Hola"}')

    async def run_both():
        return await asyncio.gather(
            first.run(AssistRequest(flow=Flow.TEXT_ASSIST, text="Hello", target_lang="Spanish")),
            first.run(AssistRequest(flow=Flow.TEXT_ASSIST, text="Goodbye", target_lang="Spanish")),
        )

    results = asyncio.run(run_both())

    assert results == ["Hola", "Hola"]


@pytest.mark.parametrize(
    ("flow", "expected"),
    [
        (Flow.TEXT_ASSIST, ["Content Processing"]),
        (Flow.VOICE_ASSISTANT, ["Upload", "Transcription", "Content Processing", "Speech Synthesis"]),
        (Flow.PRACTICE_MODE, ["Upload", "Transcription", "Pronunciation Evaluation"]),
    ],
)
def test_describe_lists_stages_in_order(flow: Flow, expected: list[str]) -> None:
    stages = list(PipelineOrchestrator.describe(flow))

    assert [stage.name for stage in stages] == expected
    assert [stage.order for stage in stages] == list(range(1, len(expected) + 1))


def test_unknown_section_is_input_error() -> None:
    with pytest.raises(InputError, match="Unknown section"):
        Flow.from_section("Karaoke")
