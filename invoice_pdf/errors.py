"""Exceptions raised by the conversion pipeline."""

from __future__ import annotations


class DependencyError(RuntimeError):
    """Raised when a required runtime dependency is missing."""


class ConversionError(RuntimeError):
    """Any failure while turning the render target into a PDF."""


class InvalidNavigationTarget(ConversionError):
    """The browser could not navigate to the render target at all."""


class RenderResponseError(ConversionError):
    """The render target answered with an error-range status."""

    def __init__(self, status: int) -> None:
        super().__init__("Cannot render the page correctly")
        self.status = status


class ConversionTimeout(ConversionError):
    """The conversion exceeded its overall time budget."""


class BrowserNotFoundError(ConversionError):
    """No browser executable could be resolved for this environment."""
