from typing import Optional


class IconGenError(Exception):
    """Base class for every fatal error raised by the icon tooling."""


class ConfigurationError(IconGenError):
    pass


class ParseError(IconGenError):
    """A pack data file could not be parsed."""

    def __init__(self, path, message: str, line: Optional[int] = None) -> None:
        self.path = path
        self.line = line
        where = f"{path} at line {line}" if line is not None else str(path)
        super().__init__(f"JSON parse failed in {where}: {message}")


class UpstreamError(IconGenError):
    """The image endpoint answered with a non-success status (or not at all)."""

    def __init__(self, service: str, status: Optional[int], body: str) -> None:
        self.service = service
        self.status = status
        self.body = body
        if status is None:
            super().__init__(f"{service} request failed: {body}")
        else:
            super().__init__(f"{service} error {status}: {body}")


class ResponseShapeError(IconGenError):
    pass


class FileSystemError(IconGenError):
    pass
