#!/usr/bin/env python3
"""
Tests for app/spdx_helper.py: config, process-wide state and
document lookup.
"""

import sys
import tempfile
import unittest
from pathlib import Path

sys.path.insert(0, str(Path(__file__).parent.parent / "app"))
sys.path.insert(0, str(Path(__file__).parent))

import spdx_helper
from spdx_errors import InvalidFileName, MultipleDocuments, NoDocument
from spdx_helper import (
    get_document_uri,
    load_config,
    read_document,
    resource_path,
)
from spdx_records import PACKAGE, ModelRecord
from spdx_samples import NAMESPACE, sample_stream, write_sample
from spdx_stores import IdKind, JsonStore, SpdxStore


class TestLoadConfig(unittest.TestCase):
    """Tests for load_config()."""

    def test_loads_real_config(self):
        config = load_config()
        self.assertIn("documents", config)
        self.assertIn("schema", config)
        self.assertNotIn("rdf", config)

    def test_loads_custom_path(self):
        import yaml
        with tempfile.NamedTemporaryFile(
            mode="w", suffix=".yaml", delete=False,
        ) as f:
            yaml.dump({"test": True}, f)
            tmp = Path(f.name)
        result = load_config(tmp)
        self.assertTrue(result["test"])
        tmp.unlink()

    def test_schema_resource_exists(self):
        config = load_config()
        self.assertTrue(
            resource_path(config["schema"]["resource"]).is_file()
        )

    def test_absolute_resource_path(self):
        absolute = Path(tempfile.gettempdir()) / "x.json"
        self.assertEqual(resource_path(absolute), absolute)


class TestInitialize(unittest.TestCase):
    """Tests for initialize() and the process-wide registry."""

    def tearDown(self):
        spdx_helper.initialize()

    def test_defaults(self):
        spdx_helper.initialize()
        self.assertEqual(
            spdx_helper.supported_versions(),
            ["SPDX-2.2", "SPDX-2.3"],
        )
        self.assertTrue(spdx_helper.is_supported_version("SPDX-2.3"))
        self.assertFalse(
            spdx_helper.is_supported_version("SPDX-2.1")
        )
        self.assertIsInstance(spdx_helper.default_store(), SpdxStore)

    def test_custom_config(self):
        spdx_helper.initialize({
            "documents": {
                "default_namespace": "https://example.org/ns",
                "supported_versions": ["SPDX-2.3"],
            },
        })
        self.assertEqual(
            spdx_helper.default_namespace(),
            "https://example.org/ns",
        )
        self.assertFalse(
            spdx_helper.is_supported_version("SPDX-2.2")
        )

    def test_reinitialize_replaces_store(self):
        spdx_helper.initialize()
        first = spdx_helper.default_store()
        spdx_helper.initialize()
        self.assertIsNot(spdx_helper.default_store(), first)

    def test_default_namespace_used_for_ids(self):
        spdx_helper.initialize({
            "documents": {
                "default_namespace": "https://example.org/ns",
            },
        })
        store = SpdxStore()
        store.put(ModelRecord(
            "https://example.org/ns#__anon__1",
            PACKAGE, "SPDX-2.3", {},
        ))
        self.assertEqual(
            store.next_identifier(IdKind.ANONYMOUS),
            "__anon__2",
        )


class TestDocumentLookup(unittest.TestCase):
    """Tests for get_document_uri() and read_document()."""

    def test_empty_store(self):
        with self.assertRaises(NoDocument):
            get_document_uri(SpdxStore())

    def test_single_document(self):
        store = JsonStore()
        store.deserialize(sample_stream())
        self.assertEqual(get_document_uri(store), NAMESPACE)

    def test_multiple_documents(self):
        store = JsonStore()
        store.deserialize(sample_stream())
        store.deserialize(sample_stream(
            documentNamespace="https://example.org/spdx/other"
        ))
        with self.assertRaises(MultipleDocuments):
            get_document_uri(store)

    def test_read_document(self):
        with tempfile.TemporaryDirectory() as tmp:
            path = write_sample(Path(tmp) / "sample.json")
            document = read_document(path)
        self.assertEqual(
            document.creation_info.document_namespace, NAMESPACE
        )
        self.assertEqual(document.packages[0].name, "app")

    def test_read_document_needs_extension(self):
        with self.assertRaises(InvalidFileName):
            read_document("sample")


if __name__ == "__main__":
    unittest.main()
