from typing import Iterable


class ModelNotFoundError(Exception):
    """One or more requested backends are not registered."""

    def __init__(self, names: Iterable[str]) -> None:
        self.names = list(names)
        super().__init__("The following models are not available: " + ", ".join(self.names))


class UnsupportedMediaTypeError(Exception):
    def __init__(self, content_type: str | None) -> None:
        self.content_type = content_type
        super().__init__(f"Content-Type '{content_type or ''}' is not supported")
