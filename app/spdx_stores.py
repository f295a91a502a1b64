#!/usr/bin/env python3
"""
Serializable SPDX model stores, one per file format.

Every store keeps its document as ModelRecord objects (see
spdx_records) and offers the same surface:

    store.deserialize(stream)            -> document URI
    store.serialize(stream)
    store.all_items(document_uri, type)  -> iterator of records
    store.next_identifier(kind, document_uri)

Format classes only decide how a spdx_tools Document is read
from and written to a stream; parsing and writing themselves are
delegated to spdx_tools (and rdflib for Turtle). RDF stores work
on binary streams, the others on text streams.

Classes:

    - IdKind: identifier families handed out by next_identifier
    - SpdxStore: in-memory record store, base of the format stores
    - JsonStore, YamlStore, XmlStore, TagValueStore: spdx_tools
      parsers and writers for those formats
    - RdfStore: RDF/XML or Turtle through rdflib
"""

import copy
import json
import logging
import tempfile
import warnings
from contextlib import contextmanager
from enum import Enum
from pathlib import Path

import yaml
from rdflib import DOAP, RDF, RDFS, Graph, Literal, URIRef
from rdflib.compare import to_isomorphic
from spdx_tools.spdx.parser.error import SPDXParsingError
from spdx_tools.spdx.parser.jsonlikedict.json_like_dict_parser import (
    JsonLikeDictParser,
)
from spdx_tools.spdx.parser.rdf.rdf_parser import (
    translate_graph_to_document,
)
from spdx_tools.spdx.parser.tagvalue.parser import (
    Parser as TagValueParser,
)
from spdx_tools.spdx.parser.xml import xml_parser
from spdx_tools.spdx.rdfschema.namespace import (
    POINTER_NAMESPACE,
    SPDX_NAMESPACE,
)
from spdx_tools.spdx.writer.json import json_writer
from spdx_tools.spdx.writer.rdf.annotation_writer import (
    add_annotation_to_graph,
)
from spdx_tools.spdx.writer.rdf.creation_info_writer import (
    add_creation_info_to_graph,
)
from spdx_tools.spdx.writer.rdf.extracted_licensing_info_writer import (
    add_extracted_licensing_info_to_graph,
)
from spdx_tools.spdx.writer.rdf.file_writer import add_file_to_graph
from spdx_tools.spdx.writer.rdf.license_expression_writer import (
    add_license_expression_or_none_or_no_assertion,
)
from spdx_tools.spdx.writer.rdf.package_writer import (
    add_package_to_graph,
)
from spdx_tools.spdx.writer.rdf.relationship_writer import (
    add_relationship_to_graph,
)
from spdx_tools.spdx.writer.rdf.snippet_writer import add_range_to_graph
from spdx_tools.spdx.writer.rdf.writer_utils import (
    add_namespace_to_spdx_id,
    add_optional_literal,
)
from spdx_tools.spdx.writer.tagvalue import tagvalue_writer
from spdx_tools.spdx.writer.write_utils import validate_and_deduplicate
from spdx_tools.spdx.writer.xml import xml_writer
from spdx_tools.spdx.writer.yaml import yaml_writer

import spdx_helper
from spdx_errors import DecodeError, EncodeError, InvalidModel
from spdx_records import (
    ANONYMOUS_PREFIX,
    CROSS_REF,
    EXTERNAL_DOC_REF,
    SPDX_DOCUMENT,
    DanglingReference,
    document_to_records,
    element_uri,
    records_to_document,
)

logger = logging.getLogger(__name__)


class IdKind(Enum):
    """Identifier families; the value is the id prefix."""

    ANONYMOUS = ANONYMOUS_PREFIX
    SPDX_ID = "SPDXRef-gnrtd"
    LICENSE_REF = "LicenseRef-gnrtd"
    DOCUMENT_REF = "DocumentRef-gnrtd"


# ============================================================
# In-memory store
# ============================================================

class SpdxStore:
    """In-memory record store.

    Records are kept in insertion order, so a document
    decomposed and rebuilt keeps the order of its elements.
    The base class cannot read or write a file format; the
    subclasses below implement _read() and _write().
    """

    format = None
    binary = False

    def __init__(self):
        self._records = {}
        self._counters = {}
        self.warnings = []

    def __len__(self):
        return len(self._records)

    def get(self, object_uri):
        return self._records.get(object_uri)

    def put(self, record):
        """Store *record*, replacing any record at its URI."""
        self._records[record.object_uri] = record

    def all_items(self, document_uri, type_filter=None):
        """Iterate the records of *document_uri*.

        The iterator walks a snapshot taken when this is
        called; records added afterwards are not seen.
        """
        prefix = document_uri + "#"
        snapshot = [
            record for record in self._records.values()
            if record.object_uri.startswith(prefix)
            and (
                type_filter is None
                or record.type == type_filter
            )
        ]
        return iter(snapshot)

    def document_uris(self):
        """URIs of every SPDX document held in the store."""
        return [
            record.object_uri.rpartition("#")[0]
            for record in self._records.values()
            if record.type == SPDX_DOCUMENT
        ]

    def find_external_ref(self, document_uri, external_uri):
        """ExternalDocumentRef of *document_uri* naming *external_uri*."""
        for record in self.all_items(
            document_uri, EXTERNAL_DOC_REF
        ):
            if record.properties.get(
                "document_uri"
            ) == external_uri:
                return record
        return None

    def next_identifier(self, id_kind, document_uri=None):
        """Return an id of *id_kind* not yet used in this store."""
        namespace = (
            document_uri or spdx_helper.default_namespace()
        )
        key = (id_kind, namespace)
        while True:
            self._counters[key] = (
                self._counters.get(key, 0) + 1
            )
            candidate = f"{id_kind.value}{self._counters[key]}"
            if element_uri(
                namespace, candidate
            ) not in self._records:
                return candidate

    @contextmanager
    def transaction(self):
        """Restore the stored records if the block raises."""
        saved = dict(self._records)
        try:
            yield self
        except Exception:
            self._records = saved
            raise

    # --------------------------------------------------------
    # spdx_tools Document bridge
    # --------------------------------------------------------

    def load_document(self, document):
        """Add a copy of *document* as records; return its URI."""
        document = copy.deepcopy(document)
        info = document.creation_info
        namespace = info.document_namespace
        records = document_to_records(
            document,
            lambda: self.next_identifier(
                IdKind.ANONYMOUS, namespace
            ),
        )
        for record in records:
            self.put(record)
        if not spdx_helper.is_supported_version(
            info.spdx_version
        ):
            message = (
                f"Unsupported SPDX version {info.spdx_version}; "
                "supported versions are "
                + ", ".join(spdx_helper.supported_versions())
            )
            logger.warning(message)
            self.warnings.append(message)
        return namespace

    def to_document(self, document_uri=None):
        """Rebuild the spdx_tools Document for *document_uri*."""
        if document_uri is None:
            document_uri = spdx_helper.get_document_uri(self)
        return records_to_document(
            list(self.all_items(document_uri)), document_uri
        )

    # --------------------------------------------------------
    # Serialization
    # --------------------------------------------------------

    def deserialize(self, stream):
        """Parse *stream* and add its document to this store.

        Nothing is stored unless the whole stream parses.
        Warnings emitted by the parser are kept in
        self.warnings.
        """
        with warnings.catch_warnings(record=True) as caught:
            warnings.simplefilter("always")
            try:
                document = self._read(stream)
            except SPDXParsingError as exc:
                raise InvalidModel(
                    f"Unable to parse {self.format} document: "
                    + "; ".join(exc.get_messages()),
                    exc.get_messages(),
                ) from exc
            except Exception as exc:
                raise DecodeError(
                    f"Unable to parse {self.format} document: "
                    f"{exc}"
                ) from exc
        self.warnings.extend(
            str(item.message) for item in caught
        )
        return self.load_document(document)

    def serialize(self, stream):
        """Write the single document held by this store."""
        document_uri = self._serialization_uri()
        try:
            document = self.to_document(document_uri)
        except DanglingReference as exc:
            raise EncodeError(str(exc)) from exc
        try:
            self._write(document, stream)
        except Exception as exc:
            raise EncodeError(
                f"Unable to write {self.format} document: "
                f"{exc}"
            ) from exc

    def _serialization_uri(self):
        return spdx_helper.get_document_uri(self)

    def _read(self, stream):
        raise NotImplementedError(
            f"{type(self).__name__} cannot read a file format"
        )

    def _write(self, document, stream):
        raise NotImplementedError(
            f"{type(self).__name__} cannot write a file format"
        )


# ============================================================
# Format stores
# ============================================================

class JsonStore(SpdxStore):
    """SPDX JSON."""

    format = "JSON"

    def _read(self, stream):
        return JsonLikeDictParser().parse(json.load(stream))

    def _write(self, document, stream):
        json_writer.write_document_to_stream(
            document, stream, False
        )


class YamlStore(SpdxStore):
    """SPDX YAML, same tree as JSON."""

    format = "YAML"

    def _read(self, stream):
        return JsonLikeDictParser().parse(
            yaml.safe_load(stream)
        )

    def _write(self, document, stream):
        yaml_writer.write_document_to_stream(
            document, stream, False
        )


class XmlStore(SpdxStore):
    """SPDX XML (not RDF/XML)."""

    format = "XML"

    def _read(self, stream):
        # spdx_tools only parses XML from a named file
        with tempfile.TemporaryDirectory() as tmp:
            path = Path(tmp) / "document.xml"
            path.write_text(stream.read(), encoding="utf-8")
            return xml_parser.parse_from_file(str(path))

    def _write(self, document, stream):
        xml_writer.write_document_to_stream(
            document, stream, False
        )


class TagValueStore(SpdxStore):
    """SPDX tag/value."""

    format = "TAG"

    def _read(self, stream):
        return TagValueParser().parse(stream.read())

    def _write(self, document, stream):
        tagvalue_writer.write_document_to_stream(
            document, stream, False
        )


# ============================================================
# RDF
# ============================================================

def _add_snippet_to_graph(snippet, graph, doc_namespace, external_refs):
    """Like spdx_tools' add_snippet_to_graph, minus absent ranges.

    A snippet may carry only a byte range or only a line
    range; spdx_tools' writer expects both.
    """
    snippet_node = URIRef(add_namespace_to_spdx_id(
        snippet.spdx_id, doc_namespace, external_refs
    ))
    graph.add((snippet_node, RDF.type, SPDX_NAMESPACE.Snippet))

    file_ref = URIRef(add_namespace_to_spdx_id(
        snippet.file_spdx_id, doc_namespace, external_refs
    ))
    graph.add((snippet_node, SPDX_NAMESPACE.snippetFromFile, file_ref))
    for range_information, pointer_class in (
        (snippet.byte_range, POINTER_NAMESPACE.ByteOffsetPointer),
        (snippet.line_range, POINTER_NAMESPACE.LineCharPointer),
    ):
        if range_information is not None:
            add_range_to_graph(
                range_information, graph, snippet_node,
                file_ref, pointer_class,
            )

    add_license_expression_or_none_or_no_assertion(
        snippet.license_concluded, graph, snippet_node,
        SPDX_NAMESPACE.licenseConcluded, doc_namespace,
    )
    add_license_expression_or_none_or_no_assertion(
        snippet.license_info_in_snippet, graph, snippet_node,
        SPDX_NAMESPACE.licenseInfoInSnippet, doc_namespace,
    )
    add_optional_literal(
        snippet.license_comment, graph, snippet_node,
        SPDX_NAMESPACE.licenseComments,
    )
    add_optional_literal(
        snippet.copyright_text, graph, snippet_node,
        SPDX_NAMESPACE.copyrightText,
    )
    add_optional_literal(
        snippet.comment, graph, snippet_node, RDFS.comment
    )
    add_optional_literal(
        snippet.name, graph, snippet_node, SPDX_NAMESPACE.name
    )
    for text in snippet.attribution_texts:
        graph.add((
            snippet_node, SPDX_NAMESPACE.attributionText,
            Literal(text),
        ))


def document_to_graph(document):
    """Build the SPDX RDF graph of *document*.

    Element order and helpers follow spdx_tools' rdf_writer;
    snippets go through _add_snippet_to_graph.
    """
    document = validate_and_deduplicate(document, False, True)
    graph = Graph()
    namespace = document.creation_info.document_namespace
    external_refs = {
        ref.document_ref_id: ref.document_uri
        for ref in document.creation_info.external_document_refs
    }
    doc_node = add_creation_info_to_graph(
        document.creation_info, graph
    )
    for annotation in document.annotations:
        add_annotation_to_graph(
            annotation, graph, namespace, external_refs
        )
    for file in document.files:
        add_file_to_graph(file, graph, namespace, external_refs)
    for package in document.packages:
        add_package_to_graph(
            package, graph, namespace, external_refs
        )
    for relationship in document.relationships:
        add_relationship_to_graph(
            relationship, graph, namespace, external_refs
        )
    for snippet in document.snippets:
        _add_snippet_to_graph(
            snippet, graph, namespace, external_refs
        )
    for licence in document.extracted_licensing_info:
        add_extracted_licensing_info_to_graph(
            licence, graph, doc_node, namespace
        )

    graph = to_isomorphic(graph)
    graph.bind("spdx", SPDX_NAMESPACE)
    graph.bind("doap", DOAP)
    graph.bind("ptr", POINTER_NAMESPACE)
    return graph


class RdfStore(SpdxStore):
    """SPDX RDF, written as RDF/XML or Turtle.

    The converter hands the document URI and the licence
    detail switch to this store before copying into it.
    When license details are switched off, CrossRef records
    are not stored. rdflib parses RDF/XML with the expat
    SAX driver.
    """

    binary = True

    RDF_FORMATS = {"xml": "RDFXML", "turtle": "RDFTTL"}

    def __init__(self, output_format="xml"):
        super().__init__()
        if output_format not in self.RDF_FORMATS:
            raise ValueError(
                f"Unknown RDF output format {output_format}"
            )
        self.output_format = output_format
        self.format = self.RDF_FORMATS[output_format]
        self.document_uri = None
        self.dont_store_license_details = False

    def set_document_uri(self, document_uri):
        self.document_uri = document_uri

    def set_dont_store_license_details(self, flag):
        self.dont_store_license_details = bool(flag)

    def put(self, record):
        if (
            self.dont_store_license_details
            and record.type == CROSS_REF
        ):
            return
        super().put(record)

    def _serialization_uri(self):
        return (
            self.document_uri
            or super()._serialization_uri()
        )

    def _read(self, stream):
        graph = Graph()
        graph.parse(source=stream, format=self.output_format)
        return translate_graph_to_document(graph)

    def _write(self, document, stream):
        graph = document_to_graph(document)
        if self.output_format == "xml":
            graph.serialize(
                stream, "pretty-xml",
                encoding="UTF-8", max_depth=100,
            )
        else:
            graph.serialize(
                destination=stream, format="turtle",
                encoding="utf-8",
            )
