#!/usr/bin/env python3
"""
Shared helpers for the SPDX convert and verify tools.

Holds the process-wide state both tools rely on: the loaded
config.yaml, the registry of supported SPDX versions and the
process-default store and namespace, plus convenience readers
that load a whole document from a file.

Usage:

    import spdx_helper

    spdx_helper.initialize()
    document = spdx_helper.read_document("sbom.spdx.json")

Functions:

    - load_config: read config.yaml
    - initialize: register model versions, create the default store
    - get_document_uri: the single document URI held by a store
    - read_document: file -> spdx_tools Document
"""

import logging
from pathlib import Path

import yaml

from spdx_errors import MultipleDocuments, NoDocument

logger = logging.getLogger(__name__)


# ============================================================
# Configuration
# ============================================================

def load_config(config_path=None):
    """Load config.yaml from the given path or script directory."""
    if config_path is None:
        config_path = (
            Path(__file__).parent / "config.yaml"
        )
    with open(config_path, "r", encoding="utf-8") as f:
        return yaml.safe_load(f)


_config = None


def get_config():
    """Lazy singleton for the default config."""
    global _config
    if _config is None:
        _config = load_config()
    return _config


def configure_logging(config=None):
    """Set up root logging from the logging section of config."""
    log_cfg = (config or get_config()).get("logging", {})
    logging.basicConfig(
        level=log_cfg.get("level", "WARNING"),
        format=log_cfg.get(
            "format", "%(levelname)s %(name)s: %(message)s"
        ),
    )


def resource_path(relative):
    """Resolve a path from config relative to this directory."""
    path = Path(relative)
    if path.is_absolute():
        return path
    return Path(__file__).parent / path


# ============================================================
# Process-wide initialization
# ============================================================

_supported_versions = []
_default_namespace = None
_default_store = None


def initialize(config=None):
    """Register supported model versions and the default store.

    Safe to call more than once; later calls replace the
    registry and the default store.
    """
    global _default_namespace, _default_store
    from spdx_stores import SpdxStore

    config = config or get_config()
    docs_cfg = config.get("documents", {})
    _supported_versions[:] = list(
        docs_cfg.get("supported_versions", [])
    )
    _default_namespace = docs_cfg.get(
        "default_namespace",
        "https://spdx.org/documents/default",
    )
    _default_store = SpdxStore()
    logger.debug(
        "Registered SPDX versions %s, default namespace %s",
        _supported_versions, _default_namespace,
    )


def _ensure_initialized():
    if _default_store is None:
        initialize()


def supported_versions():
    """Return the registered SPDX versions."""
    _ensure_initialized()
    return list(_supported_versions)


def is_supported_version(spec_version):
    return spec_version in supported_versions()


def default_namespace():
    """Namespace used when no document URI is at hand."""
    _ensure_initialized()
    return _default_namespace


def default_store():
    """Process-default in-memory store."""
    _ensure_initialized()
    return _default_store


# ============================================================
# Document lookup
# ============================================================

def get_document_uri(store):
    """Return the URI of the one SPDX document in *store*."""
    uris = store.document_uris()
    if not uris:
        raise NoDocument(
            "No SPDX documents in model store"
        )
    if len(uris) > 1:
        raise MultipleDocuments(
            "Multiple SPDX documents in model store. "
            "There can only be one SPDX document."
        )
    return uris[0]


def read_document(file_path, fmt=None):
    """Read *file_path* into a fresh store and return its Document.

    The format is inferred from the file name when *fmt*
    is not given.
    """
    from spdx_formats import (
        format_to_store, infer_from_filename,
    )

    if fmt is None:
        fmt = infer_from_filename(file_path)
    store = format_to_store(fmt)
    mode = "rb" if store.binary else "r"
    kwargs = {} if store.binary else {"encoding": "utf-8"}
    with open(file_path, mode, **kwargs) as stream:
        store.deserialize(stream)
    return store.to_document(get_document_uri(store))
