class ChatAgentError(Exception):
    pass


class SpeechCaptureError(ChatAgentError):
    pass


class PermissionDenied(SpeechCaptureError):
    pass


class DeviceError(SpeechCaptureError):
    pass


class ReplySourceFailure(ChatAgentError):
    pass


class UploadError(ChatAgentError):
    pass


class SessionError(ChatAgentError):
    pass
