"""Error taxonomy shared by the backend adapters and view-models."""

from __future__ import annotations


class GalleryError(Exception):
    """Base class for every failure surfaced by a gallery operation."""

    kind = "error"


class NotFoundError(GalleryError):
    """The picture or tag no longer exists on the backend."""

    kind = "not_found"


class BackendUnavailableError(GalleryError):
    """Network or process failure while talking to the backend."""

    kind = "backend_unavailable"


class ValidationError(GalleryError):
    """Input rejected before (or by) the backend."""

    kind = "validation"
