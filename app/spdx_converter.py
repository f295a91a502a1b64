#!/usr/bin/env python3
"""
Convert an SPDX document from one file format to another.

Reads the input file into a store for its format, copies the
document's records into a store for the output format, and writes
that store to the output file. The output file must not exist yet;
it is never overwritten.

Usage:

    spdx-convert fromFile toFile [fromFormat toFormat] [excludeLicenseDetails]

    python3 spdx_converter.py sbom.spdx.json sbom.spdx
    python3 spdx_converter.py in.json out.rdf.ttl JSON RDFTTL
    python3 spdx_converter.py in.json out.ttl JSON RDFTTL excludeLicenseDetails

Formats are JSON, XLS, XLSX, TAG, RDFXML, RDFTTL, YAML or XML and
are taken from the file extensions when not given.
"""

import argparse
import logging
import sys
from contextlib import contextmanager
from pathlib import Path

import spdx_helper
from spdx_copier import ModelCopier
from spdx_errors import (
    ConversionFailure,
    DestinationExists,
    InvalidFileName,
    SourceNotFound,
    UnsupportedFormat,
)
from spdx_formats import (
    SerFileType,
    format_to_store,
    infer_from_filename,
    str_to_format,
    supported_formats,
)
from spdx_stores import RdfStore

logger = logging.getLogger(__name__)

ERROR_STATUS = 1
EXCLUDE_LICENSE_DETAILS = "excludelicensedetails"


# ============================================================
# Conversion
# ============================================================

@contextmanager
def _scoped_stream(path, mode, label):
    """Open *path*; a failing close is logged, not raised."""
    kwargs = {} if "b" in mode else {"encoding": "utf-8"}
    stream = open(path, mode, **kwargs)
    try:
        yield stream
    finally:
        try:
            stream.close()
        except OSError as exc:
            logger.warning(
                "Error closing %s file: %s", label, exc
            )


def _resolve_format(fmt, path, label):
    if fmt is None:
        try:
            return infer_from_filename(path)
        except InvalidFileName as exc:
            raise InvalidFileName(
                f"{label} file {path} does not end with "
                "a valid SPDX file extension."
            ) from exc
    if isinstance(fmt, SerFileType):
        return fmt
    return str_to_format(fmt)


def _convert(
    from_path, to_path, from_format, to_format,
    exclude_license_details,
):
    if not from_path.exists():
        raise SourceNotFound(
            f"Input file {from_path} does not exist."
        )
    if to_path.exists():
        raise DestinationExists(
            f"Output file {to_path} already exists."
        )
    from_format = _resolve_format(from_format, from_path, "From")
    to_format = _resolve_format(to_format, to_path, "To")

    from_store = format_to_store(from_format)
    to_store = format_to_store(to_format)

    with _scoped_stream(
        from_path, "rb" if from_store.binary else "r", "input"
    ) as stream:
        from_store.deserialize(stream)
    document_uri = spdx_helper.get_document_uri(from_store)
    logger.info(
        "Read %s document %s from %s",
        from_format.value, document_uri, from_path,
    )

    if isinstance(to_store, RdfStore):
        to_store.set_document_uri(document_uri)
        to_store.set_dont_store_license_details(
            exclude_license_details
        )
    ModelCopier().copy(
        to_store, from_store, document_uri,
        exclude_license_details,
    )

    with _scoped_stream(
        to_path, "wb" if to_store.binary else "w", "output"
    ) as stream:
        to_store.serialize(stream)
    logger.info(
        "Wrote %s document to %s", to_format.value, to_path
    )


def convert(
    from_path, to_path, from_format=None, to_format=None,
    exclude_license_details=False,
):
    """Convert the SPDX file at *from_path* into *to_path*.

    *from_format*/*to_format* are SerFileType values or format
    tokens; when omitted they are inferred from the file
    names. Raises ConversionFailure, with the original error
    as its cause, on any failure. A partially written output
    file is not removed.
    """
    try:
        _convert(
            Path(from_path), Path(to_path),
            from_format, to_format,
            exclude_license_details,
        )
    except Exception as exc:
        message = (
            "Error converting SPDX file: "
            f"{type(exc).__name__}"
        )
        if str(exc):
            message = f"{message} {exc}"
        raise ConversionFailure(message, exc) from exc


# ============================================================
# CLI entry point
# ============================================================

def _usage():
    formats = ", ".join(fmt.value for fmt in supported_formats())
    print("Usage:")
    print(
        "spdx-convert fromFilePath toFilePath "
        "[fromFileType] [toFileType] [excludeLicenseDetails]"
    )
    print("\tfromFilePath - File path of the file to convert from")
    print("\ttoFilePath - output file")
    print(
        "\t[fromFileType] - optional file type of the input "
        f"file. One of {formats}. If not provided the file "
        "type will be determined by the file extension"
    )
    print(
        "\t[toFileType] - optional file type of the output "
        f"file. One of {formats}. If not provided the file "
        "type will be determined by the file extension"
    )
    print(
        "\t[excludeLicenseDetails] - If present, listed "
        "license and listed exception properties will not "
        "be included in the output file"
    )


def main(argv=None):
    parser = argparse.ArgumentParser(
        description="Convert between SPDX file formats",
    )
    parser.add_argument(
        "from_file", nargs="?",
        help="File path of the file to convert from",
    )
    parser.add_argument(
        "to_file", nargs="?", help="Output file path",
    )
    parser.add_argument(
        "options", nargs="*",
        metavar="fromFormat toFormat excludeLicenseDetails",
        help="Optional formats and licence detail switch",
    )
    args = parser.parse_args(argv)

    spdx_helper.initialize()
    spdx_helper.configure_logging()

    if not args.from_file or not args.to_file:
        print(
            "[ERROR] Invalid number of arguments",
            file=sys.stderr,
        )
        _usage()
        sys.exit(ERROR_STATUS)

    options = args.options
    if len(options) > 3:
        print("[WARN] Extra arguments will be ignored")
    if len(options) == 1:
        print(
            "[WARN] Only the input file type specified "
            "- it will be ignored"
        )
    exclude = (
        len(options) >= 3
        and options[2].lower() == EXCLUDE_LICENSE_DETAILS
    )

    from_format = to_format = None
    if len(options) >= 2:
        for label, token in (
            ("From", options[0]), ("To", options[1]),
        ):
            try:
                fmt = str_to_format(token)
            except UnsupportedFormat:
                print(
                    f"[ERROR] {label} file type is not a "
                    f"valid SPDX file type: {token}",
                    file=sys.stderr,
                )
                _usage()
                sys.exit(ERROR_STATUS)
            if label == "From":
                from_format = fmt
            else:
                to_format = fmt

    try:
        convert(
            args.from_file, args.to_file,
            from_format, to_format, exclude,
        )
    except ConversionFailure as exc:
        print(
            f"[ERROR] Error converting: {exc}",
            file=sys.stderr,
        )
        sys.exit(ERROR_STATUS)


if __name__ == "__main__":
    main()
