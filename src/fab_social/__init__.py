"""Social copy generation and fitting for the Fan Advisory Board site."""

__all__ = ["config", "models", "platforms", "fitter"]
