"""Unit tests for microphone input."""

import threading
from unittest.mock import MagicMock, patch

import pytest

from marginalia.audio import AudioChunk, create_audio_capture
from marginalia.audio.backends.pyaudio_input import PyAudioCapture, find_input_device
from marginalia.audio.mock_capture import MockAudioCapture
from marginalia.config import AudioConfig


class TestAudioChunk:
    """Test AudioChunk dataclass."""

    def test_duration_ms(self) -> None:
        """Test duration from byte length."""
        chunk = AudioChunk(data=bytes(3200), sample_rate=16000)

        assert chunk.duration_ms == pytest.approx(100.0)

    def test_duration_stereo(self) -> None:
        chunk = AudioChunk(data=bytes(3200), sample_rate=16000, channels=2)

        assert chunk.duration_ms == pytest.approx(50.0)

    def test_zero_sample_rate(self) -> None:
        assert AudioChunk(data=bytes(10), sample_rate=0).duration_ms == 0.0


class TestMockAudioCapture:
    """Test the mock microphone."""

    def test_start_stop(self) -> None:
        capture = MockAudioCapture()
        assert not capture.is_active

        capture.start()
        assert capture.is_active
        assert capture.start_count == 1

        capture.stop()
        assert not capture.is_active

    def test_stream_silence_until_stopped(self) -> None:
        """Test the stream yields silent chunks and ends on stop."""
        capture = MockAudioCapture(chunk_size=160)
        capture.start()
        received: list[AudioChunk] = []

        for chunk in capture.stream():
            received.append(chunk)
            if len(received) == 3:
                capture.stop()

        assert len(received) == 3
        assert all(c.data == bytes(320) for c in received)
        assert received[0].sample_rate == 16000

    def test_scripted_audio(self) -> None:
        """Test set_audio_data is streamed before silence."""
        capture = MockAudioCapture(chunk_size=2)
        capture.set_audio_data(b"\x01\x02\x03\x04\x05\x06")
        capture.start()

        stream = capture.stream()
        first, second = next(stream), next(stream)
        capture.stop()

        assert first.data == b"\x01\x02\x03\x04"
        assert second.data == b"\x05\x06\x00\x00"

    def test_stop_from_other_thread(self) -> None:
        """Test stop() ends a stream iterated on another thread."""
        capture = MockAudioCapture()
        capture.start()
        done = threading.Event()

        def consume() -> None:
            for _ in capture.stream():
                pass
            done.set()

        worker = threading.Thread(target=consume, daemon=True)
        worker.start()
        capture.stop()

        assert done.wait(2.0)

    def test_start_error(self) -> None:
        capture = MockAudioCapture()
        capture.set_start_error("device busy")

        with pytest.raises(RuntimeError, match="device busy"):
            capture.start()

        assert not capture.is_active
        assert capture.start_count == 1


class TestCreateAudioCapture:
    """Test audio capture factory."""

    def test_mock_uses_config(self) -> None:
        config = AudioConfig(sample_rate=8000, channels=1, chunk_size=256)

        capture = create_audio_capture(config, use_mock=True)

        assert isinstance(capture, MockAudioCapture)
        assert capture.sample_rate == 8000

    def test_mock_defaults(self) -> None:
        assert create_audio_capture(use_mock=True).sample_rate == 16000


class TestPyAudioCapture:
    """Test the PyAudio backend with the PortAudio module patched."""

    @pytest.fixture
    def pa(self):
        fake = MagicMock()
        fake.paContinue = 0
        with (
            patch("marginalia.audio.backends.pyaudio_input.PYAUDIO_AVAILABLE", True),
            patch("marginalia.audio.backends.pyaudio_input.pyaudio", fake),
        ):
            yield fake.PyAudio.return_value

    def test_requires_pyaudio(self) -> None:
        with patch("marginalia.audio.backends.pyaudio_input.PYAUDIO_AVAILABLE", False):
            with pytest.raises(RuntimeError, match="PyAudio"):
                PyAudioCapture()

    def test_callback_buffers_streamed(self, pa: MagicMock) -> None:
        """Test buffers pushed by the callback come out of stream()."""
        capture = PyAudioCapture(chunk_size=160)
        capture.start()
        callback = pa.open.call_args.kwargs["stream_callback"]

        callback(bytes(320), 160, None, 0)
        callback(bytes(320), 160, None, 0)
        capture.stop()

        received = list(capture.stream())
        assert len(received) == 2
        assert received[0].duration_ms == pytest.approx(10.0)
        assert not capture.is_active
        pa.terminate.assert_called_once()

    def test_open_failure(self, pa: MagicMock) -> None:
        """Test a device error becomes RuntimeError and releases PortAudio."""
        pa.open.side_effect = OSError("Invalid input device")
        capture = PyAudioCapture()

        with pytest.raises(RuntimeError, match="Invalid input device"):
            capture.start()

        assert not capture.is_active
        pa.terminate.assert_called_once()

    def test_stop_when_idle(self, pa: MagicMock) -> None:
        PyAudioCapture().stop()

        pa.terminate.assert_not_called()

    def test_find_input_device(self) -> None:
        """Test name matching skips output-only devices."""
        pa = MagicMock()
        devices = [
            {"name": "USB Microphone (output)", "maxInputChannels": 0},
            {"name": "Built-in Output", "maxInputChannels": 0},
            {"name": "USB Microphone", "maxInputChannels": 1},
        ]
        pa.get_device_count.return_value = len(devices)
        pa.get_device_info_by_index.side_effect = devices.__getitem__

        assert find_input_device(pa, "usb microphone") == 2
        assert find_input_device(pa, "missing") is None
        assert find_input_device(pa, "default") is None
