"""
Tests for confirmation playback.

Copyright (c) 2024 Cleansheet LLC
License: CC BY 4.0
"""

from unittest.mock import MagicMock, patch

import pytest

from dental_voice_chart.confirmation.speaker import AudioPlayer, ConfirmationSpeaker
from dental_voice_chart.errors import ServiceUnavailableError, SynthesisError

LOAD_SD = "dental_voice_chart.confirmation.speaker._load_sounddevice"


class TestAudioPlayer:
    """Tests for AudioPlayer."""

    def test_play_decodes_and_plays(self, speech_wav_bytes: bytes):
        """Test decoded samples go to the output device."""
        sd = MagicMock()
        with patch(LOAD_SD, return_value=sd):
            AudioPlayer().play(speech_wav_bytes)

        sd.play.assert_called_once()
        data, sample_rate = sd.play.call_args.args
        assert sample_rate == 16000
        assert len(data) == 32000
        assert sd.play.call_args.kwargs["blocking"] is False

    def test_undecodable_audio(self):
        with patch(LOAD_SD, return_value=MagicMock()):
            with pytest.raises(SynthesisError, match="Playback failed"):
                AudioPlayer().play(b"not audio")

    def test_playback_error(self, speech_wav_bytes: bytes):
        sd = MagicMock()
        sd.play.side_effect = RuntimeError("device busy")
        with patch(LOAD_SD, return_value=sd):
            with pytest.raises(SynthesisError, match="device busy"):
                AudioPlayer(blocking=True).play(speech_wav_bytes)


class TestConfirmationSpeaker:
    """Tests for ConfirmationSpeaker."""

    @pytest.fixture
    def tts(self) -> MagicMock:
        tts = MagicMock()
        tts.synthesize.return_value = b"audio"
        return tts

    @pytest.fixture
    def player(self) -> MagicMock:
        return MagicMock()

    def test_announce(self, tts: MagicMock, player: MagicMock):
        speaker = ConfirmationSpeaker(tts, player=player)

        assert speaker.announce("기록 완료.") is True
        tts.synthesize.assert_called_once_with("기록 완료.")
        player.play.assert_called_once_with(b"audio")

    def test_disabled_without_client(self, player: MagicMock):
        speaker = ConfirmationSpeaker(None, player=player)

        assert speaker.enabled is False
        assert speaker.announce("기록 완료.") is False
        player.play.assert_not_called()

    def test_disabled_by_flag(self, tts: MagicMock, player: MagicMock):
        speaker = ConfirmationSpeaker(tts, player=player, enabled=False)

        assert speaker.announce("기록 완료.") is False
        tts.synthesize.assert_not_called()

    def test_empty_text(self, tts: MagicMock, player: MagicMock):
        assert ConfirmationSpeaker(tts, player=player).announce("") is False
        tts.synthesize.assert_not_called()

    def test_synthesis_failure_is_reported(self, tts: MagicMock, player: MagicMock):
        """Test service errors become a False return."""
        tts.synthesize.side_effect = ServiceUnavailableError("synthesis", "timed out")

        assert ConfirmationSpeaker(tts, player=player).announce("기록 완료.") is False
        player.play.assert_not_called()

    def test_playback_failure_is_reported(self, tts: MagicMock, player: MagicMock):
        player.play.side_effect = SynthesisError("Playback failed: no device")

        assert ConfirmationSpeaker(tts, player=player).announce("기록 완료.") is False

    def test_announce_failure(self, tts: MagicMock, player: MagicMock):
        speaker = ConfirmationSpeaker(tts, player=player)

        assert speaker.announce_failure() is True
        tts.synthesize.assert_called_once_with("분석에 실패했습니다.")

    def test_announce_failure_with_detail(self, tts: MagicMock, player: MagicMock):
        ConfirmationSpeaker(tts, player=player).announce_failure("다시 말씀해주세요.")

        tts.synthesize.assert_called_once_with("분석에 실패했습니다. 다시 말씀해주세요.")
