from typing import Any


class PlanGenerationError(Exception):
    """Base error for the AI generation endpoints.

    ``details`` is JSON-serialisable and returned to the caller alongside the
    message.
    """

    status_code = 500

    def __init__(self, message: str, details: Any = None):
        super().__init__(message)
        self.message = message
        self.details = details


class LLMNotConfiguredError(PlanGenerationError):
    pass


class LLMProviderError(PlanGenerationError):
    pass


class ResponseTooLongError(PlanGenerationError):
    pass


class PlanParseError(PlanGenerationError):
    pass
