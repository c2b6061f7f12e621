class PipelineError(Exception):
    """Base for every failure the voice pipeline reports to the caller.

    ``status_code`` and ``detail`` are what the HTTP layer sends back; the
    message passed to the constructor is only logged.
    """

    status_code = 500
    detail = "Internal error"

    def __init__(self, message: str = ""):
        super().__init__(message or self.detail)


class ValidationError(PipelineError):
    status_code = 400
    detail = "Invalid request"


class TranscriptionEmpty(PipelineError):
    status_code = 400
    detail = "Invalid audio"


class TranscriptionFailed(PipelineError):
    status_code = 400
    detail = "Invalid audio"


class CompletionFailed(PipelineError):
    status_code = 500
    detail = "Invalid response"


class SynthesisFailed(PipelineError):
    status_code = 500
    detail = "Voice synthesis failed"


class UpstreamRateLimited(PipelineError):
    status_code = 429
    detail = "Too many requests"
