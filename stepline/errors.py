"""
Exception types raised by stepline.

Operations raise a StepError subclass; the executor turns it into the
failure of the current run. Every step error is terminal for the run.
"""

from __future__ import annotations


class SteplineError(Exception):
    """Base exception for stepline."""


class PipelineDefinitionError(SteplineError):
    """A pipeline definition could not be read or does not match the schema."""


class EmptyPipeline(SteplineError):
    """A run was requested with no steps."""


class StepError(SteplineError):
    """A step failed while transforming its input."""


class InvalidInputEncoding(StepError):
    """Base64, URL or hex input could not be decoded."""


class MalformedStructuredData(StepError):
    """XML or JSON input could not be parsed."""


class MissingExtractionTarget(StepError):
    """The XML tag or JSON path was not found or resolved to nothing."""


class CorruptArchive(StepError):
    """A ZIP or gzip payload is damaged, empty or not an archive at all."""


class MissingCryptoParameter(StepError):
    """The secret key or a required IV is missing."""


class CryptoOperationFailure(StepError):
    """The cipher rejected its parameters or decryption produced garbage."""


class UnknownOperationKind(StepError):
    """A step names an operation outside the supported set."""
