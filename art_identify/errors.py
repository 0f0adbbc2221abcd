"""Domain errors raised before the pipeline has any side effect."""

from __future__ import annotations


class IdentifyError(Exception):
    status_code = 400


class ArtworkNotFound(IdentifyError):
    status_code = 404


class NotArtworkOwner(IdentifyError):
    status_code = 403


class InvalidCandidate(IdentifyError):
    status_code = 400
