"""
Error types raised by the cookbook pipeline.

Configuration problems fail fast when a component is constructed.
Validation problems are reported to the immediate caller. Failures
detected inside collaborator adapters derive from CollaboratorError;
everything else a client library raises propagates untouched.
"""


class CookbookError(Exception):
    """Base class for all cookbook errors."""


class ConfigurationError(CookbookError, ValueError):
    """Invalid component configuration (sizes, factors, thresholds, paths)."""


class ValidationError(CookbookError, ValueError):
    """Invalid caller input, such as an empty question."""


class CollaboratorError(CookbookError):
    """An external service returned something unusable."""


class EmbeddingError(CollaboratorError):
    """The embedding service returned an unexpected result."""


class CompletionError(CollaboratorError):
    """The language model returned no answer."""
