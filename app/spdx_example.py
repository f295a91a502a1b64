#!/usr/bin/env python3
"""
Build a small SPDX document in code, write it out and verify it.

The document is assembled from spdx_tools model objects, loaded
into the store for the output format and serialized from there,
the same path spdx-convert takes after reading its input. The
written file is then checked with the verifier.

Document contents:
  - one package (example-lib 1.0, Apache-2.0)
  - one file inside it with a SHA1 checksum
  - DESCRIBES from the document, CONTAINS from the package

Usage:

    spdx-example example.spdx.json
    spdx-example example.rdf.xml --namespace https://example.org/spdx/x
"""

import argparse
import logging
import sys
from datetime import datetime, timezone
from pathlib import Path

from spdx_tools.common.spdx_licensing import spdx_licensing
from spdx_tools.spdx.model import (
    Actor,
    ActorType,
    Checksum,
    ChecksumAlgorithm,
    CreationInfo,
    Document,
    File,
    Package,
    PackageVerificationCode,
    Relationship,
    RelationshipType,
    SpdxNoAssertion,
)

import spdx_helper
from spdx_errors import SpdxToolsError
from spdx_formats import format_to_store, infer_from_filename
from spdx_verify import verify

logger = logging.getLogger(__name__)

ERROR_STATUS = 1

DOCUMENT_NAME = "example-document"
PACKAGE_ID = "SPDXRef-Package-example-lib"
FILE_ID = "SPDXRef-File-example-lib-main"


def build_document(namespace):
    """Return an SPDX 2.3 Document describing one package."""
    creation_info = CreationInfo(
        spdx_version="SPDX-2.3",
        spdx_id="SPDXRef-DOCUMENT",
        name=DOCUMENT_NAME,
        document_namespace=namespace,
        creators=[
            Actor(ActorType.TOOL, "spdx-model-tools-example"),
        ],
        created=datetime.now(timezone.utc).replace(microsecond=0),
    )
    package = Package(
        spdx_id=PACKAGE_ID,
        name="example-lib",
        download_location="https://example.org/example-lib-1.0.tar.gz",
        version="1.0",
        files_analyzed=True,
        verification_code=PackageVerificationCode(
            "d6a770ba38583ed4bb4525bd96e50461655d2758"
        ),
        license_concluded=spdx_licensing.parse("Apache-2.0"),
        license_declared=spdx_licensing.parse("Apache-2.0"),
        copyright_text="Copyright 2026 Example Org",
    )
    main_file = File(
        name="./src/main.c",
        spdx_id=FILE_ID,
        checksums=[
            Checksum(
                ChecksumAlgorithm.SHA1,
                "2fd4e1c67a2d28fced849ee1bb76e7391b93eb12",
            ),
        ],
        license_concluded=spdx_licensing.parse("Apache-2.0"),
        copyright_text=SpdxNoAssertion(),
    )
    relationships = [
        Relationship(
            "SPDXRef-DOCUMENT", RelationshipType.DESCRIBES, PACKAGE_ID
        ),
        Relationship(PACKAGE_ID, RelationshipType.CONTAINS, FILE_ID),
    ]
    return Document(
        creation_info,
        packages=[package],
        files=[main_file],
        relationships=relationships,
    )


def write_example(output_path, namespace=None, fmt=None):
    """Write the example document to *output_path*.

    The format comes from the file extension unless *fmt* is
    given. Returns the verifier's messages for the written file.
    """
    if namespace is None:
        namespace = (
            spdx_helper.default_namespace().rstrip("/")
            + "/" + DOCUMENT_NAME
        )
    if fmt is None:
        fmt = infer_from_filename(output_path)
    store = format_to_store(fmt)
    document_uri = store.load_document(build_document(namespace))
    logger.info("Writing %s as %s to %s", document_uri, fmt.value,
                output_path)

    mode = "wb" if store.binary else "w"
    kwargs = {} if store.binary else {"encoding": "utf-8"}
    with open(output_path, mode, **kwargs) as stream:
        store.serialize(stream)
    return verify(output_path, fmt)


# ============================================================
# CLI entry point
# ============================================================

def main(argv=None):
    parser = argparse.ArgumentParser(
        description="Write and verify an example SPDX document",
    )
    parser.add_argument(
        "output", help="Output file; its extension selects the format",
    )
    parser.add_argument(
        "--namespace", default=None,
        help="Document namespace (default: from config.yaml)",
    )
    args = parser.parse_args(argv)

    spdx_helper.initialize()
    spdx_helper.configure_logging()

    if Path(args.output).exists():
        print(
            f"[ERROR] Output file already exists: {args.output}",
            file=sys.stderr,
        )
        sys.exit(ERROR_STATUS)

    try:
        messages = write_example(args.output, args.namespace)
    except (SpdxToolsError, OSError) as exc:
        print(f"[ERROR] {exc}", file=sys.stderr)
        sys.exit(ERROR_STATUS)

    if messages:
        print(f"Wrote {args.output}, but it is not valid due to:")
        for message in messages:
            print(f"\t{message}")
        sys.exit(ERROR_STATUS)
    print(f"Wrote {args.output}. This SPDX Document is valid.")


if __name__ == "__main__":
    main()
