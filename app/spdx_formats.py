#!/usr/bin/env python3
"""
Format registry: file types, file extensions and their stores.

Maps a format token (JSON, TAG, RDFXML, ...) or a file name to a
SerFileType, and a SerFileType to a fresh store able to read and
write it. XLS and XLSX are recognized but have no store yet.

Usage:

    fmt = infer_from_filename("sbom.rdf.xml")   # SerFileType.RDFXML
    store = format_to_store(fmt)
"""

from enum import Enum
from pathlib import Path

from spdx_errors import InvalidFileName, UnsupportedFormat
from spdx_stores import (
    JsonStore,
    RdfStore,
    TagValueStore,
    XmlStore,
    YamlStore,
)


class SerFileType(Enum):
    JSON = "JSON"
    RDFXML = "RDFXML"
    XML = "XML"
    XLS = "XLS"
    XLSX = "XLSX"
    YAML = "YAML"
    TAG = "TAG"
    RDFTTL = "RDFTTL"


EXT_TO_FORMAT = {
    "json": SerFileType.JSON,
    "rdf.xml": SerFileType.RDFXML,
    "rdf": SerFileType.RDFXML,
    "xml": SerFileType.XML,
    "xls": SerFileType.XLS,
    "xlsx": SerFileType.XLSX,
    "yaml": SerFileType.YAML,
    "yml": SerFileType.YAML,
    "tag": SerFileType.TAG,
    "spdx": SerFileType.TAG,
    "rdf.ttl": SerFileType.RDFTTL,
}

# Extensions that are only meaningful as the tail of a
# compound extension: "doc.rdf.ttl", "doc.rdf.xml".
COMPOUND_EXTENSIONS = {
    "xml": "rdf.xml",
    "ttl": "rdf.ttl",
}

STORE_FACTORIES = {
    SerFileType.JSON: JsonStore,
    SerFileType.RDFXML: lambda: RdfStore("xml"),
    SerFileType.RDFTTL: lambda: RdfStore("turtle"),
    SerFileType.XML: XmlStore,
    SerFileType.YAML: YamlStore,
    SerFileType.TAG: TagValueStore,
}


def supported_formats():
    """Formats that have a store, in declaration order."""
    return [
        fmt for fmt in SerFileType
        if fmt in STORE_FACTORIES
    ]


def str_to_format(token):
    """Parse a format token, ignoring case and whitespace."""
    name = str(token).strip().upper()
    try:
        return SerFileType[name]
    except KeyError:
        raise UnsupportedFormat(
            f"Unknown SPDX file type: {token}"
        ) from None


def infer_from_filename(path):
    """Return the SerFileType implied by a file name."""
    name = Path(path).name
    if "." not in name:
        raise InvalidFileName(
            "Can not convert file to file type - "
            f"no file extension for file {path}"
        )
    ext = name.rsplit(".", 1)[1].lower()
    compound = COMPOUND_EXTENSIONS.get(ext)
    if compound and name.lower().endswith(compound):
        ext = compound
    fmt = EXT_TO_FORMAT.get(ext)
    if fmt is None:
        raise InvalidFileName(
            f"Unrecognized file extension: {ext} "
            f"for file {path}"
        )
    return fmt


def format_to_store(fmt):
    """Return a new, empty store for *fmt*."""
    if not isinstance(fmt, SerFileType):
        fmt = str_to_format(fmt)
    factory = STORE_FACTORIES.get(fmt)
    if factory is None:
        raise UnsupportedFormat(
            f"Unsupported file type: {fmt.value}.  "
            "Check back later."
        )
    return factory()
