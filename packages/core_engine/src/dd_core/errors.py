"""
Error types raised while compiling a dictionary.

Every error is fatal for the run: the compiler never produces a partial
artifact, so callers either get a complete document or one of these.
"""

from typing import Optional

from dd_core.issues import Issue


class DictionaryError(Exception):
    """Base exception for all dictionary compilation errors."""

    code = "DICTIONARY_ERROR"

    def __init__(self, message: str, path: str = "/", code: Optional[str] = None):
        self.message = message
        self.issue = Issue(
            severity="error",
            code=code or self.code,
            message=message,
            path=path,
        )
        super().__init__(message)


class StreamError(DictionaryError):
    """
    Raised when a source document cannot be read or tokenized.

    Examples:
    - Malformed markup
    - Unreadable root or entity file
    - Numeric attribute that is not a base-10 integer
    """

    code = "STREAM_ERROR"


class ContextError(DictionaryError):
    """
    Raised when a tag handler lacks the scope it needs.

    Examples:
    - Command or type definition outside any application
    - AVP with neither application nor vendor in scope
    - Enum, type or gavp tag outside an AVP
    - Missing key attribute on a handled tag
    """

    code = "CONTEXT_ERROR"


class ResolutionError(DictionaryError):
    """Raised when a declared type cannot be traced to a primitive."""

    code = "RESOLUTION_ERROR"


class DiscoveryError(DictionaryError):
    """Raised when no input documents can be found."""

    code = "DISCOVERY_ERROR"


class StoreError(DictionaryError):
    """Raised on misuse of the entity store."""

    code = "STORE_ERROR"


class ConfigError(DictionaryError):
    """Raised when the compiler configuration file is invalid."""

    code = "CONFIG_ERROR"
