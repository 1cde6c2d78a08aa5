class LLMError(RuntimeError):
    pass


class LLMValidationError(LLMError):
    """Raised when the model output does not match the requested schema."""
