"""Errors raised at the engine's input boundary."""


class InvalidInputError(ValueError):
    """Raised when an utterance or listing record cannot enter the engine."""


def require_utterance(utterance: object) -> str:
    """Return ``utterance`` if it is a string, otherwise raise.

    Args:
        utterance: Value supplied by the caller as the user's text

    Returns:
        The utterance unchanged

    Raises:
        InvalidInputError: If the value is not a string
    """
    if not isinstance(utterance, str):
        raise InvalidInputError(
            f"Utterance must be a string, got {type(utterance).__name__}"
        )
    return utterance
