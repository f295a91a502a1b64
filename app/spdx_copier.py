#!/usr/bin/env python3
"""
Copy one SPDX document's records from a store into another.

The copy runs in two passes. External document references go
first, because records copied later may point at elements of
other documents, and such a reference is only valid once the
ExternalDocumentRef naming that document exists in the
destination. Everything else follows in the source store's order.

A record that cannot be copied raises CopyFailure and the
destination is left as it was before the copy started.

Usage:

    copier = ModelCopier()
    copier.copy(dest_store, source_store, document_uri)
"""

import copy
import logging

from spdx_errors import CopyFailure
from spdx_records import (
    ANONYMOUS_PREFIX,
    CROSS_REF,
    EXTERNAL_DOC_REF,
    DanglingReference,
    ModelRecord,
    ObjectRef,
    element_uri,
)
from spdx_stores import IdKind

logger = logging.getLogger(__name__)


class ModelCopier:
    """Copies records between stores, translating references.

    Anonymous records get fresh ids from the destination; the
    mapping from source to destination URIs is kept for the
    lifetime of the copier so references to records copied
    later resolve to the same destination URI.
    """

    def __init__(self):
        self._uri_map = {}

    def copy(
        self, dest, source, document_uri,
        exclude_license_details=False,
    ):
        """Copy every record of *document_uri*; return the count."""
        self._uri_map = {}
        copied = 0
        with dest.transaction():
            for record in source.all_items(
                document_uri, EXTERNAL_DOC_REF
            ):
                self.copy_item(
                    dest, source, record, document_uri + "#"
                )
                copied += 1
            logger.debug(
                "Copied %d external document references of %s",
                copied, document_uri,
            )

            for record in source.all_items(document_uri):
                if record.type == EXTERNAL_DOC_REF:
                    continue
                if (
                    exclude_license_details
                    and record.type == CROSS_REF
                ):
                    continue
                self.copy_item(
                    dest, source, record, document_uri
                )
                copied += 1
        logger.debug(
            "Copied %d records of %s", copied, document_uri
        )
        return copied

    def copy_item(self, dest, source, record, to_namespace):
        """Copy a single *record* of *source* into *dest*.

        *to_namespace* is the destination document URI, with
        or without the trailing "#". Returns the destination
        object URI.
        """
        namespace = (
            to_namespace[:-1] if to_namespace.endswith("#")
            else to_namespace
        )
        source_namespace = record.object_uri.rpartition("#")[0]
        try:
            properties = {
                key: self._translate(
                    value, source_namespace, namespace, dest
                )
                for key, value in copy.deepcopy(
                    record.properties
                ).items()
            }
            object_uri = self._map_uri(
                record.object_uri, namespace, dest
            )
        except DanglingReference as exc:
            raise CopyFailure(
                record.object_uri, record.type, str(exc)
            ) from exc
        except Exception as exc:
            raise CopyFailure(
                record.object_uri, record.type,
                f"{type(exc).__name__}: {exc}",
            ) from exc
        dest.put(ModelRecord(
            object_uri, record.type,
            record.spec_version, properties,
        ))
        return object_uri

    def _map_uri(self, object_uri, namespace, dest):
        mapped = self._uri_map.get(object_uri)
        if mapped is not None:
            return mapped
        local_id = object_uri.rpartition("#")[2]
        if local_id.startswith(ANONYMOUS_PREFIX):
            local_id = dest.next_identifier(
                IdKind.ANONYMOUS, namespace
            )
        mapped = element_uri(namespace, local_id)
        self._uri_map[object_uri] = mapped
        return mapped

    def _translate(self, value, source_namespace, namespace, dest):
        if isinstance(value, list):
            return [
                self._translate(
                    item, source_namespace, namespace, dest
                )
                for item in value
            ]
        if not isinstance(value, ObjectRef):
            return value
        if value.document_uri == source_namespace:
            return ObjectRef(
                self._map_uri(value.object_uri, namespace, dest)
            )
        if dest.find_external_ref(
            namespace, value.document_uri
        ) is None:
            raise DanglingReference(value.object_uri)
        return value
