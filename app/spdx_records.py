#!/usr/bin/env python3
"""
Model object records: the unit of storage and copying.

A store does not keep spdx_tools Document objects around. It
decomposes each document into flat records, one per addressable
entity, keyed by object URI:

    <namespace>#SPDXRef-DOCUMENT       SpdxDocument
    <namespace>#DocumentRef-xyz        ExternalDocumentRef
    <namespace>#SPDXRef-Package-1      Package / File / Snippet
    <namespace>#LicenseRef-foo         ExtractedLicensingInfo
    <namespace>#__anon__7              Relationship / Annotation / CrossRef

Element ids held in reference positions are replaced by ObjectRef
values. An id such as "DocumentRef-ext:SPDXRef-lib" points into
another document and becomes ObjectRef("<ext uri>#SPDXRef-lib");
turning it back into an id needs the matching ExternalDocumentRef
record, otherwise the reference is dangling.

Classes:

    - ObjectRef: reference from one record to another
    - ModelRecord: one stored entity
    - DanglingReference: a reference that cannot be turned into an id

Functions:

    - document_to_records: Document -> [ModelRecord]
    - records_to_document: [ModelRecord] -> Document
"""

import copy
import dataclasses

from spdx_tools.spdx.model import (
    Annotation,
    CreationInfo,
    Document,
    ExternalDocumentRef,
    ExtractedLicensingInfo,
    File,
    Package,
    Relationship,
    Snippet,
)

SPDX_DOCUMENT = "SpdxDocument"
EXTERNAL_DOC_REF = "ExternalDocumentRef"
PACKAGE = "Package"
FILE = "File"
SNIPPET = "Snippet"
RELATIONSHIP = "Relationship"
ANNOTATION = "Annotation"
EXTRACTED_LICENSE = "ExtractedLicensingInfo"
CROSS_REF = "CrossRef"

ANONYMOUS_PREFIX = "__anon__"


@dataclasses.dataclass(frozen=True)
class ObjectRef:
    """Reference to the record stored under *object_uri*."""

    object_uri: str

    @property
    def document_uri(self):
        return self.object_uri.rpartition("#")[0]

    @property
    def local_id(self):
        return self.object_uri.rpartition("#")[2]


@dataclasses.dataclass
class ModelRecord:
    """One entity owned by a store."""

    object_uri: str
    type: str
    spec_version: str
    properties: dict = dataclasses.field(default_factory=dict)

    @property
    def local_id(self):
        return self.object_uri.rpartition("#")[2]

    @property
    def is_anonymous(self):
        return self.local_id.startswith(ANONYMOUS_PREFIX)


class DanglingReference(ValueError):
    """Reference into a document no ExternalDocumentRef names."""

    def __init__(self, object_uri):
        super().__init__(
            f"dangling reference to {object_uri}: no external "
            "document reference for its document"
        )
        self.object_uri = object_uri


def element_uri(namespace, local_id):
    return f"{namespace}#{local_id}"


def _fields(obj, exclude=()):
    return {
        f.name: getattr(obj, f.name)
        for f in dataclasses.fields(obj)
        if f.name not in exclude
    }


# ============================================================
# Document -> records
# ============================================================

def _id_to_ref(element_id, namespace, external_uris):
    """Turn an SPDX element id into an ObjectRef.

    NOASSERTION/NONE and ids naming an undeclared
    DocumentRef are returned unchanged.
    """
    if not isinstance(element_id, str):
        return element_id
    if ":" in element_id:
        ref_id, _, local = element_id.partition(":")
        if ref_id not in external_uris:
            return element_id
        return ObjectRef(
            element_uri(external_uris[ref_id], local)
        )
    return ObjectRef(element_uri(namespace, element_id))


def document_to_records(document, next_anonymous_id):
    """Decompose *document* into records.

    *next_anonymous_id* is called for every entity that has
    no SPDX id of its own and must return a fresh local id.
    """
    info = document.creation_info
    namespace = info.document_namespace
    version = info.spdx_version
    external_uris = {
        ref.document_ref_id: ref.document_uri
        for ref in info.external_document_refs
    }

    def anonymous_uri():
        return element_uri(namespace, next_anonymous_id())

    def ref(element_id):
        return _id_to_ref(element_id, namespace, external_uris)

    records = [
        ModelRecord(
            element_uri(namespace, info.spdx_id),
            SPDX_DOCUMENT, version,
            _fields(info, exclude=("external_document_refs",)),
        )
    ]
    for ext in info.external_document_refs:
        records.append(ModelRecord(
            element_uri(namespace, ext.document_ref_id),
            EXTERNAL_DOC_REF, version, _fields(ext),
        ))

    for record_type, elements in (
        (PACKAGE, document.packages),
        (FILE, document.files),
    ):
        for element in elements:
            records.append(ModelRecord(
                element_uri(namespace, element.spdx_id),
                record_type, version, _fields(element),
            ))

    for snippet in document.snippets:
        props = _fields(snippet)
        props["file_spdx_id"] = ref(snippet.file_spdx_id)
        records.append(ModelRecord(
            element_uri(namespace, snippet.spdx_id),
            SNIPPET, version, props,
        ))

    for licence in document.extracted_licensing_info:
        uri = (
            element_uri(namespace, licence.license_id)
            if licence.license_id else anonymous_uri()
        )
        records.append(ModelRecord(
            uri, EXTRACTED_LICENSE, version,
            _fields(licence, exclude=("cross_references",)),
        ))
        for url in licence.cross_references:
            records.append(ModelRecord(
                anonymous_uri(), CROSS_REF, version,
                {"url": url, "license": ObjectRef(uri)},
            ))

    for relationship in document.relationships:
        props = _fields(relationship)
        props["spdx_element_id"] = ref(
            relationship.spdx_element_id
        )
        props["related_spdx_element_id"] = ref(
            relationship.related_spdx_element_id
        )
        records.append(ModelRecord(
            anonymous_uri(), RELATIONSHIP, version, props,
        ))

    for annotation in document.annotations:
        props = _fields(annotation)
        props["spdx_id"] = ref(annotation.spdx_id)
        records.append(ModelRecord(
            anonymous_uri(), ANNOTATION, version, props,
        ))

    return records


# ============================================================
# Records -> Document
# ============================================================

def records_to_document(records, document_uri):
    """Rebuild the spdx_tools Document held in *records*.

    Raises DanglingReference when a record points into a
    document that no ExternalDocumentRef record names, and
    ValueError when there is no SpdxDocument record.
    """
    by_type = {}
    for record in records:
        by_type.setdefault(record.type, []).append(record)

    roots = by_type.get(SPDX_DOCUMENT, [])
    if not roots:
        raise ValueError(
            f"No SPDX document record for {document_uri}"
        )
    externals = by_type.get(EXTERNAL_DOC_REF, [])
    external_ids = {
        r.properties["document_uri"]: r.properties["document_ref_id"]
        for r in externals
    }
    prefix = document_uri + "#"

    def resolve(value):
        if isinstance(value, list):
            return [resolve(item) for item in value]
        if not isinstance(value, ObjectRef):
            return value
        if value.object_uri.startswith(prefix):
            return value.object_uri[len(prefix):]
        ref_id = external_ids.get(value.document_uri)
        if ref_id is None:
            raise DanglingReference(value.object_uri)
        return f"{ref_id}:{value.local_id}"

    def build(cls, record, **extra):
        props = {
            key: resolve(value)
            for key, value in copy.deepcopy(
                record.properties
            ).items()
        }
        props.update(extra)
        return cls(**props)

    creation_info = build(
        CreationInfo, roots[0],
        external_document_refs=[
            build(ExternalDocumentRef, r) for r in externals
        ],
    )

    cross_refs = {}
    for record in by_type.get(CROSS_REF, []):
        cross_refs.setdefault(
            record.properties["license"].object_uri, []
        ).append(record.properties["url"])

    return Document(
        creation_info=creation_info,
        packages=[
            build(Package, r) for r in by_type.get(PACKAGE, [])
        ],
        files=[
            build(File, r) for r in by_type.get(FILE, [])
        ],
        snippets=[
            build(Snippet, r) for r in by_type.get(SNIPPET, [])
        ],
        annotations=[
            build(Annotation, r)
            for r in by_type.get(ANNOTATION, [])
        ],
        relationships=[
            build(Relationship, r)
            for r in by_type.get(RELATIONSHIP, [])
        ],
        extracted_licensing_info=[
            build(
                ExtractedLicensingInfo, r,
                cross_references=cross_refs.get(
                    r.object_uri, []
                ),
            )
            for r in by_type.get(EXTRACTED_LICENSE, [])
        ],
    )
