class AssistantError(Exception):
    """Base for errors reported to the caller as a structured JSON body."""
    status_code = 500
    category = "generic"

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class RequestValidationFailed(AssistantError):
    status_code = 400
    category = "validation"


class UpstreamDependencyError(AssistantError):
    status_code = 502
    category = "upstream_dependency"


class RateLimitedError(AssistantError):
    status_code = 429
    category = "rate_limit"


class AnswerGenerationError(AssistantError):
    status_code = 500
    category = "generic"
