"""Exceptions raised by fab_social."""


class FabSocialError(Exception):
    """Base class for fab_social errors."""


class InvalidArticleError(FabSocialError, ValueError):
    """Article lacks a title, or has neither body nor summary."""


class PromptStoreError(FabSocialError):
    """Prompt overrides could not be read or written."""
