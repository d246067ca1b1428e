"""
Scan workflow errors.

Every stage failure is caught at the workflow boundary; `user_message` is the
short text shown to the caller, str(error) is the full detail kept in
state_internal and the logs.
"""


class ScanError(Exception):
    user_message = "Something went wrong while scanning the page"

    def __init__(self, message: str, user_message: str = None):
        super().__init__(message)
        if user_message:
            self.user_message = user_message


class NavigationError(ScanError):
    """The page could not be opened or the browser failed."""
    user_message = "The page could not be loaded"


class ContentError(ScanError):
    """Too little text on the page to check."""
    user_message = "Not enough text content found on the page"


class ModelResponseError(ScanError):
    """An LLM response was missing or did not match the expected schema."""
    user_message = "The language model returned an unusable response"
