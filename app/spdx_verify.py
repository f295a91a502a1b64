#!/usr/bin/env python3
"""
Verify an SPDX document and list every problem found.

Messages come from three sources, reported in this order:

  1. Parser warnings collected by the store while reading, and
     the parser's errors when the input decodes but does not
     form an SPDX model. Semantic rules are skipped then.
  2. JSON Schema (JSON files only) against the bundled SPDX
     schema, resources/spdx-schema.json.
  3. Semantic rules from spdx-tools
     (validate_full_spdx_document) on the document rebuilt
     from the store.

Each message appears once; an empty list means the document is
valid.

Usage:

    spdx-verify sbom.spdx.json
    spdx-verify sbom.txt TAG

Classes:

    - SpdxVerifier: the verification pipeline
"""

import argparse
import json
import logging
import sys
from pathlib import Path

import jsonschema
from spdx_tools.spdx.validation.document_validator import (
    validate_full_spdx_document,
)

import spdx_helper
from spdx_errors import (
    InvalidFileName,
    InvalidModel,
    SpdxToolsError,
    UnsupportedFormat,
    VerificationFailure,
)
from spdx_formats import (
    SerFileType,
    format_to_store,
    infer_from_filename,
    str_to_format,
    supported_formats,
)

logger = logging.getLogger(__name__)

ERROR_STATUS = 1

SCHEMA_IO_ERROR = (
    "Unable to validate JSON file against schema "
    "due to I/O Error"
)
SCHEMA_PROCESSING_ERROR = (
    "Unable to validate JSON file against schema "
    "due to processing exception"
)


def _merge(messages, new_messages):
    """Append each of *new_messages* not already in *messages*."""
    for message in new_messages:
        if message not in messages:
            messages.append(message)
    return messages


# ============================================================
# Verification pipeline
# ============================================================

class SpdxVerifier:
    """Verifies SPDX files in any supported format.

    The JSON Schema is read from the path configured under
    schema.resource (relative to this directory) unless
    *schema_path* is given. Messages containing the
    configured ignored_marker ("$id") are validator
    artifacts and are dropped.
    """

    def __init__(self, schema_path=None, config=None):
        schema_cfg = (
            config or spdx_helper.get_config()
        ).get("schema", {})
        self.schema_path = Path(
            schema_path
            or spdx_helper.resource_path(
                schema_cfg.get(
                    "resource", "resources/spdx-schema.json"
                )
            )
        )
        self.ignored_marker = schema_cfg.get(
            "ignored_marker", "$id"
        )
        self._schema = None

    def verify(self, file_path, fmt):
        """Return the verification messages for *file_path*.

        *fmt* is a SerFileType or a format token. Raises
        VerificationFailure when the file cannot be read
        or decoded; a decoded file that lacks mandatory
        fields yields the parser's messages instead.
        """
        file_path = Path(file_path)
        if not file_path.exists():
            raise VerificationFailure(
                f"File {file_path} not found."
            )
        if not file_path.is_file():
            raise VerificationFailure(
                f"{file_path} is not a file."
            )
        try:
            if not isinstance(fmt, SerFileType):
                fmt = str_to_format(fmt)
            store = format_to_store(fmt)
        except SpdxToolsError as exc:
            raise VerificationFailure(
                "Error converting fileType to store", exc
            ) from exc

        document = None
        parse_messages = []
        try:
            mode = "rb" if store.binary else "r"
            kwargs = (
                {} if store.binary else {"encoding": "utf-8"}
            )
            with open(file_path, mode, **kwargs) as stream:
                try:
                    store.deserialize(stream)
                except InvalidModel as exc:
                    logger.info(
                        "%s does not form an SPDX model: %s",
                        file_path, exc,
                    )
                    parse_messages = exc.messages or [str(exc)]
            if not parse_messages:
                document = store.to_document(
                    spdx_helper.get_document_uri(store)
                )
        except OSError as exc:
            raise VerificationFailure(
                "IO Error reading SPDX file", exc
            ) from exc
        except (SpdxToolsError, ValueError) as exc:
            raise VerificationFailure(
                "Analysis exception processing SPDX file: "
                f"{exc}",
                exc,
            ) from exc

        messages = _merge([], store.warnings)
        _merge(messages, parse_messages)
        if fmt == SerFileType.JSON:
            _merge(messages, self._validate_schema(file_path))
        if document is not None:
            _merge(messages, self._validate_semantic(document))
        logger.info(
            "Verified %s: %d message(s)",
            file_path, len(messages),
        )
        return messages

    def load_schema(self):
        if self._schema is None:
            with open(
                self.schema_path, "r", encoding="utf-8"
            ) as f:
                self._schema = json.load(f)
        return self._schema

    def _validate_schema(self, file_path):
        """Validate against the SPDX JSON Schema."""
        try:
            schema = self.load_schema()
            with open(file_path, "r", encoding="utf-8") as f:
                doc_json = json.load(f)
        except OSError as exc:
            logger.warning(
                "Could not read schema or document: %s", exc
            )
            return [SCHEMA_IO_ERROR]
        except ValueError as exc:
            logger.warning("Invalid JSON: %s", exc)
            return [SCHEMA_PROCESSING_ERROR]

        try:
            jsonschema.Draft7Validator.check_schema(schema)
            validator = jsonschema.Draft7Validator(schema)
            errors = sorted(
                validator.iter_errors(doc_json),
                key=lambda e: (
                    [str(p) for p in e.absolute_path],
                    e.message,
                ),
            )
        except Exception as exc:
            logger.warning(
                "Schema validation failed: %s", exc
            )
            return [SCHEMA_PROCESSING_ERROR]

        messages = []
        for error in errors:
            if self.ignored_marker in error.message:
                continue
            message = error.message
            if error.absolute_path:
                pointer = "/".join(
                    str(p) for p in error.absolute_path
                )
                message = f"{message} for /{pointer}"
            messages.append(message)
        return messages

    @staticmethod
    def _validate_semantic(document):
        """Validate with spdx-tools semantic rules."""
        return [
            str(m.validation_message)
            for m in validate_full_spdx_document(document)
        ]


# ============================================================
# Module-level convenience
# ============================================================

def verify(file_path, fmt):
    """Verify *file_path* read as *fmt*; see SpdxVerifier.verify."""
    return SpdxVerifier().verify(file_path, fmt)


def verify_tag_file(file_path):
    return verify(file_path, SerFileType.TAG)


def verify_rdf_file(file_path):
    return verify(file_path, SerFileType.RDFXML)


# ============================================================
# CLI entry point
# ============================================================

def main(argv=None):
    parser = argparse.ArgumentParser(
        description="Verify an SPDX document",
    )
    parser.add_argument(
        "file", nargs="?", help="Path to the SPDX file",
    )
    parser.add_argument(
        "format", nargs="?",
        help=(
            "Optional file type ("
            + "|".join(fmt.value for fmt in supported_formats())
            + "); taken from the file extension if absent"
        ),
    )
    parser.add_argument(
        "extra", nargs="*", help=argparse.SUPPRESS,
    )
    args = parser.parse_args(argv)

    spdx_helper.initialize()
    spdx_helper.configure_logging()

    if not args.file:
        print(
            "Usage:\n spdx-verify file [format]\nwhere file "
            "is the file path to an SPDX file",
            file=sys.stderr,
        )
        sys.exit(ERROR_STATUS)
    if args.extra:
        print("[WARN] Extra arguments will be ignored")

    try:
        if args.format:
            fmt = str_to_format(args.format)
        else:
            fmt = infer_from_filename(args.file)
    except UnsupportedFormat:
        print(
            f"[ERROR] Invalid file type: {args.format}",
            file=sys.stderr,
        )
        sys.exit(ERROR_STATUS)
    except InvalidFileName:
        print(
            f"[ERROR] Invalid file name: {args.file}",
            file=sys.stderr,
        )
        sys.exit(ERROR_STATUS)

    try:
        messages = verify(args.file, fmt)
    except VerificationFailure as exc:
        print(f"[ERROR] {exc}", file=sys.stderr)
        sys.exit(ERROR_STATUS)

    if messages:
        print("This SPDX Document is not valid due to:")
        for message in messages:
            print(f"\t{message}")
        sys.exit(ERROR_STATUS)
    print("This SPDX Document is valid.")


if __name__ == "__main__":
    main()
