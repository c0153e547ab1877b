import asyncio

import pytest

from presx.adapters.audio.push_audio_source import PushAudioSource
from presx.application.ports.services.audio_source import AudioSource
from presx.application.recording import RecordingCapture
from presx.domain.errors import MicrophoneAccessError, RecordingInProgressError


class BrokenSource(AudioSource):
    async def open(self):
        raise RuntimeError("no input device")


async def test_stop_without_start_is_noop():
    capture = RecordingCapture()
    assert await capture.stop() is None
    assert not capture.is_recording
    assert not capture.has_recording


async def test_pushed_chunks_are_joined_on_stop():
    capture = RecordingCapture(tick_seconds=0.01)
    source = PushAudioSource()
    await capture.start(source)
    assert capture.is_recording

    for chunk in (b"one", b"two", b"three"):
        assert source.push(chunk)
    await asyncio.sleep(0.05)

    blob = await capture.stop()
    assert blob.data == b"onetwothree"
    assert blob.chunk_count == 3
    assert blob.content_type == "audio/webm"
    assert capture.has_recording
    assert not capture.is_recording
    assert capture.elapsed_seconds >= 1


async def test_chunks_after_stop_are_rejected():
    capture = RecordingCapture()
    source = PushAudioSource()
    await capture.start(source)
    await capture.stop()
    assert source.push(b"late") is False
    assert capture.audio.chunk_count == 0


async def test_denied_microphone_leaves_state_untouched():
    capture = RecordingCapture()
    with pytest.raises(MicrophoneAccessError) as exc:
        await capture.start(PushAudioSource(granted=False, reason="NotAllowedError"))
    assert exc.value.message == "Unable to access microphone. Please check permissions."
    assert exc.value.details == {"reason": "NotAllowedError"}
    assert not capture.is_recording
    assert capture.elapsed_seconds == 0


async def test_device_failure_becomes_access_error():
    capture = RecordingCapture()
    with pytest.raises(MicrophoneAccessError):
        await capture.start(BrokenSource())
    assert not capture.is_recording


async def test_second_start_is_rejected():
    capture = RecordingCapture()
    await capture.start(PushAudioSource())
    with pytest.raises(RecordingInProgressError):
        await capture.start(PushAudioSource())
    await capture.close()
    assert not capture.is_recording


async def test_new_recording_replaces_previous():
    capture = RecordingCapture()
    first = PushAudioSource()
    await capture.start(first)
    first.push(b"old")
    await capture.stop()

    second = PushAudioSource()
    await capture.start(second)
    assert capture.audio is None
    second.push(b"new")
    blob = await capture.stop()
    assert blob.data == b"new"


async def test_chunk_count_includes_unread_chunks():
    capture = RecordingCapture()
    source = PushAudioSource()
    assert source.chunk_count == 0
    await capture.start(source)

    source.push(b"one")
    source.push(b"")
    source.push(b"two")
    # counted as soon as queued, before the capture task reads them
    assert source.chunk_count == 2

    blob = await capture.stop()
    assert blob.chunk_count == source.chunk_count
