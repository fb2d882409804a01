class RecipeBotError(Exception):
    pass


class CapabilityError(RecipeBotError):
    """A vision or generation call failed before producing any text."""

    def __init__(self, capability: str, reason: str) -> None:
        super().__init__(f"{capability} failed: {reason}")
        self.capability = capability
        self.reason = reason


class CapabilityTimeoutError(CapabilityError):
    def __init__(self, capability: str, timeout_seconds: float | None) -> None:
        super().__init__(capability, f"timed out after {timeout_seconds}s")
        self.timeout_seconds = timeout_seconds


class StructuredOutputError(RecipeBotError):
    """The model answered, but not with something we can decode."""

    def __init__(self, message: str, raw: str) -> None:
        super().__init__(message)
        self.raw = raw


class IncompleteOutputError(StructuredOutputError):
    def __init__(self, fields: list[str], raw: str) -> None:
        super().__init__(f"Incomplete structured output: {', '.join(fields)}", raw)
        self.fields = fields


class NoUsableContentError(StructuredOutputError):
    def __init__(self, raw: str) -> None:
        super().__init__("No usable content in response", raw)


class EmptyRecognitionError(RecipeBotError):
    def __init__(self, raw: str) -> None:
        super().__init__("No items recognized in image")
        self.raw = raw


class ImageFetchError(RecipeBotError):
    def __init__(self, file_id: str, reason: str) -> None:
        super().__init__(f"Failed to fetch file {file_id}: {reason}")
        self.file_id = file_id
        self.reason = reason


class PersistenceError(RecipeBotError):
    def __init__(self, operation: str, reason: str) -> None:
        super().__init__(f"Persistence error during {operation}: {reason}")
        self.operation = operation
        self.reason = reason


class RecipeNotFound(RecipeBotError):
    def __init__(self, recipe_id: int) -> None:
        super().__init__(f"Recipe not found: {recipe_id}")
        self.recipe_id = recipe_id


class CallbackDecodeError(RecipeBotError):
    def __init__(self, token: str) -> None:
        super().__init__(f"Unrecognized callback token: {token!r}")
        self.token = token
