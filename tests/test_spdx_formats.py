"""Tests for spdx_formats."""
import sys
import unittest
from pathlib import Path

sys.path.insert(
    0, str(Path(__file__).parent.parent / "app")
)

from spdx_errors import InvalidFileName, UnsupportedFormat
from spdx_formats import (
    SerFileType,
    format_to_store,
    infer_from_filename,
    str_to_format,
    supported_formats,
)
from spdx_stores import (
    JsonStore,
    RdfStore,
    TagValueStore,
    XmlStore,
    YamlStore,
)


class TestInferFromFilename(unittest.TestCase):
    """Tests for infer_from_filename()."""

    def test_known_extensions(self):
        cases = {
            "sbom.json": SerFileType.JSON,
            "sbom.spdx.json": SerFileType.JSON,
            "sbom.rdf.xml": SerFileType.RDFXML,
            "sbom.rdf": SerFileType.RDFXML,
            "sbom.xml": SerFileType.XML,
            "sbom.spdx": SerFileType.TAG,
            "sbom.tag": SerFileType.TAG,
            "sbom.rdf.ttl": SerFileType.RDFTTL,
            "sbom.yaml": SerFileType.YAML,
            "sbom.yml": SerFileType.YAML,
            "sbom.xls": SerFileType.XLS,
            "sbom.xlsx": SerFileType.XLSX,
        }
        for name, expected in cases.items():
            with self.subTest(name=name):
                self.assertEqual(
                    infer_from_filename(name), expected
                )

    def test_case_insensitive(self):
        self.assertEqual(
            infer_from_filename("SBOM.JSON"), SerFileType.JSON
        )
        self.assertEqual(
            infer_from_filename("Doc.RDF.XML"),
            SerFileType.RDFXML,
        )

    def test_directories_ignored(self):
        self.assertEqual(
            infer_from_filename("/tmp/some.dir/sbom.yaml"),
            SerFileType.YAML,
        )

    def test_no_extension(self):
        with self.assertRaises(InvalidFileName) as ctx:
            infer_from_filename("/tmp/some.dir/sbom")
        self.assertIn("no file extension", str(ctx.exception))

    def test_unknown_extension(self):
        with self.assertRaises(InvalidFileName) as ctx:
            infer_from_filename("sbom.unknownext")
        self.assertIn("unknownext", str(ctx.exception))

    def test_bare_ttl_is_not_recognized(self):
        with self.assertRaises(InvalidFileName):
            infer_from_filename("sbom.ttl")


class TestStrToFormat(unittest.TestCase):
    """Tests for str_to_format()."""

    def test_tokens(self):
        for fmt in SerFileType:
            with self.subTest(fmt=fmt):
                self.assertEqual(str_to_format(fmt.value), fmt)

    def test_case_and_whitespace(self):
        self.assertEqual(str_to_format(" rdfttl "), SerFileType.RDFTTL)
        self.assertEqual(str_to_format("Json"), SerFileType.JSON)

    def test_unknown(self):
        with self.assertRaises(UnsupportedFormat) as ctx:
            str_to_format("PDF")
        self.assertIn("PDF", str(ctx.exception))


class TestFormatToStore(unittest.TestCase):
    """Tests for format_to_store()."""

    def test_store_classes(self):
        self.assertIsInstance(
            format_to_store(SerFileType.JSON), JsonStore
        )
        self.assertIsInstance(
            format_to_store(SerFileType.YAML), YamlStore
        )
        self.assertIsInstance(
            format_to_store(SerFileType.XML), XmlStore
        )
        self.assertIsInstance(
            format_to_store(SerFileType.TAG), TagValueStore
        )

    def test_rdf_stores(self):
        xml_store = format_to_store(SerFileType.RDFXML)
        ttl_store = format_to_store(SerFileType.RDFTTL)
        self.assertIsInstance(xml_store, RdfStore)
        self.assertEqual(xml_store.output_format, "xml")
        self.assertEqual(ttl_store.output_format, "turtle")

    def test_accepts_token(self):
        self.assertIsInstance(format_to_store("json"), JsonStore)

    def test_fresh_store_each_call(self):
        first = format_to_store(SerFileType.JSON)
        second = format_to_store(SerFileType.JSON)
        self.assertIsNot(first, second)
        self.assertEqual(len(second), 0)

    def test_spreadsheets_unsupported(self):
        for fmt in (SerFileType.XLS, SerFileType.XLSX):
            with self.subTest(fmt=fmt):
                with self.assertRaises(UnsupportedFormat) as ctx:
                    format_to_store(fmt)
                self.assertIn(
                    "Check back later", str(ctx.exception)
                )

    def test_supported_formats(self):
        formats = supported_formats()
        self.assertIn(SerFileType.JSON, formats)
        self.assertNotIn(SerFileType.XLS, formats)
        self.assertNotIn(SerFileType.XLSX, formats)
        self.assertEqual(len(formats), 6)


if __name__ == "__main__":
    unittest.main()
