"""Error taxonomy for the story pipeline.

Every error carries a human-readable ``reason`` that is safe to show to the
caller, plus the HTTP status the API layer maps it to. Diagnostic detail
(raw model output, offending text) is logged where the error is raised and
never stored on the exception.
"""


class StoryPipelineError(Exception):
    status_code = 500

    def __init__(self, reason: str):
        super().__init__(reason)
        self.reason = reason


# ── Input ─────────────────────────────────────────────────────────────────────

class InputError(StoryPipelineError):
    status_code = 422


class InvalidThemeError(InputError):
    pass


class InvalidTopicError(InputError):
    pass


class InvalidAgeError(InputError):
    pass


# ── Moderation ────────────────────────────────────────────────────────────────

class SafetyRejection(StoryPipelineError):
    status_code = 422


class UnsafeTopicError(SafetyRejection):
    pass


class VocabularyRejection(SafetyRejection):
    pass


# ── Admission ─────────────────────────────────────────────────────────────────

class QuotaExceededError(StoryPipelineError):
    status_code = 429


# ── Generation service ────────────────────────────────────────────────────────

class ServiceError(StoryPipelineError):
    status_code = 502


class SafetyBlockedError(ServiceError):
    """Upstream model refused or truncated the output on safety grounds."""


class EmptyResponseError(ServiceError):
    pass


# ── Model output ──────────────────────────────────────────────────────────────

class MalformedOutputError(StoryPipelineError):
    status_code = 502


class MalformedJSONError(MalformedOutputError):
    pass


class SchemaViolationError(MalformedOutputError):
    def __init__(self, field: str, reason: str):
        super().__init__(reason)
        self.field = field


class EducationalQualityError(StoryPipelineError):
    status_code = 422


# Failures that earn the single regeneration attempt.
RETRYABLE_ERRORS = (ServiceError, MalformedOutputError, VocabularyRejection)
