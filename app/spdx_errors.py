#!/usr/bin/env python3
"""
Exception taxonomy for SPDX conversion and verification.

Store-level failures (DecodeError, EncodeError) are raised by the
format stores; the converter and the verifier catch everything at
their boundary and re-raise it as ConversionFailure or
VerificationFailure with the original exception attached.

Classes:

    - SpdxToolsError: common base class
    - InvalidFileName: no usable extension on a file name
    - UnsupportedFormat: unknown or not-yet-implemented format token
    - SourceNotFound / DestinationExists: conversion preconditions
    - DecodeError / EncodeError: malformed input, unwritable output
    - InvalidModel: input decoded but does not form an SPDX document
    - NoDocument / MultipleDocuments: store does not hold exactly one
      SPDX document
    - CopyFailure: a record could not be transferred between stores
    - ConversionFailure: umbrella error for the convert command
    - VerificationFailure: file access or store failure in verify
"""


class SpdxToolsError(Exception):
    """Base class for every error raised by these tools."""


class InvalidFileName(SpdxToolsError):
    """File name has no extension, or an unknown one."""


class UnsupportedFormat(SpdxToolsError):
    """Format token is unknown or has no store implementation."""


class SourceNotFound(SpdxToolsError):
    """Input file for a conversion does not exist."""


class DestinationExists(SpdxToolsError):
    """Output file for a conversion already exists."""


class DecodeError(SpdxToolsError):
    """A store could not parse its input stream."""


class InvalidModel(DecodeError):
    """Input decoded, but no valid SPDX model could be built from it.

    *messages* are the parser's own error messages, one per
    problem found.
    """

    def __init__(self, message, messages=()):
        super().__init__(message)
        self.messages = list(messages)


class EncodeError(SpdxToolsError):
    """A store could not write its content to the target format."""


class NoDocument(SpdxToolsError):
    """Store holds no SPDX document."""


class MultipleDocuments(SpdxToolsError):
    """Store holds more than one SPDX document."""


class CopyFailure(SpdxToolsError):
    """A single record could not be copied to the destination store."""

    def __init__(self, object_uri, object_type, reason):
        super().__init__(
            f"Unable to copy {object_type} {object_uri}: "
            f"{reason}"
        )
        self.object_uri = object_uri
        self.object_type = object_type
        self.reason = reason


class ConversionFailure(SpdxToolsError):
    """Wraps any failure raised while converting a file."""

    def __init__(self, message, cause=None):
        super().__init__(message)
        self.cause = cause


class VerificationFailure(SpdxToolsError):
    """The file to verify could not be read into a store."""

    def __init__(self, message, cause=None):
        super().__init__(message)
        self.cause = cause
