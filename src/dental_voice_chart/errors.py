"""
Error Types

Failure taxonomy for the voice-to-chart pipeline. Every error carries a
user-facing message (Korean, shown to the clinician) alongside the
developer-facing exception text.
"""


class VoiceChartError(Exception):
    """Base class for all pipeline errors."""

    default_user_message = "음성 차팅 중 오류가 발생했습니다."

    def __init__(self, message: str, user_message: str | None = None):
        super().__init__(message)
        self.user_message = user_message or self.default_user_message


# Device errors


class MicrophoneError(VoiceChartError):
    """Microphone could not be used."""

    default_user_message = "마이크를 사용할 수 없습니다."


class MicrophonePermissionError(MicrophoneError):
    """Access to the microphone was denied by the OS or the user."""

    default_user_message = "마이크 사용 권한이 거부되었습니다."


class DeviceUnavailableError(MicrophoneError):
    """No usable input device (missing, busy, or failed to open)."""

    default_user_message = "사용 가능한 마이크 장치가 없습니다."


# Service errors


class ServiceUnavailableError(VoiceChartError):
    """An external service timed out or could not be reached."""

    default_user_message = "서비스에 연결할 수 없습니다. 잠시 후 다시 시도해주세요."

    def __init__(self, service: str, message: str, user_message: str | None = None):
        super().__init__(message, user_message)
        self.service = service


class TranscriptionError(VoiceChartError):
    """Speech-to-text request failed."""

    default_user_message = "음성을 텍스트로 변환하지 못했습니다."


class ExtractionError(VoiceChartError):
    """Intent extraction request failed."""

    default_user_message = "오디오 분석에 실패했습니다."


class ExtractionContractError(ExtractionError):
    """Model reply does not satisfy the chart-operation contract."""

    default_user_message = "AI 응답을 처리하는 중 오류가 발생했습니다."

    def __init__(
        self, message: str, raw_response: str, user_message: str | None = None
    ):
        super().__init__(message, user_message)
        self.raw_response = raw_response


# Chart errors


class ChartMutationError(VoiceChartError):
    """An analysis result could not be applied to the chart."""

    default_user_message = "분석 결과를 차트에 반영하지 못했습니다."


class ChartPersistenceError(VoiceChartError):
    """The chart store rejected a read or write."""

    default_user_message = "차트 정보를 저장하는 데 실패했습니다."


# Confirmation errors


class SynthesisError(VoiceChartError):
    """Text-to-speech synthesis or playback failed."""

    default_user_message = "완료 음성을 재생하지 못했습니다."
