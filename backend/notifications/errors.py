"""Exceptions raised while routing and delivering tagmail reports."""


class MalformedRuleError(ValueError):
    """A tagmap line could not be turned into a rule."""

    def __init__(self, message: str, line_number: int | None = None, line: str | None = None):
        self.line_number = line_number
        self.line = line
        if line_number is not None:
            message = f"{message} (line {line_number}: {line!r})"
        super().__init__(message)


class RenderError(RuntimeError):
    """A record failed to render itself as report text."""


class DeliveryError(RuntimeError):
    """Routed reports could not be handed to a mail transport."""
