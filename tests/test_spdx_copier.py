"""Tests for spdx_copier."""
import sys
import unittest
from pathlib import Path

sys.path.insert(
    0, str(Path(__file__).parent.parent / "app")
)
sys.path.insert(0, str(Path(__file__).parent))

from spdx_copier import ModelCopier
from spdx_errors import CopyFailure
from spdx_records import (
    CROSS_REF,
    EXTERNAL_DOC_REF,
    PACKAGE,
    RELATIONSHIP,
    ModelRecord,
    ObjectRef,
)
from spdx_samples import NAMESPACE, UPSTREAM, sample_stream
from spdx_stores import JsonStore, RdfStore, YamlStore


def _source():
    store = JsonStore()
    store.deserialize(sample_stream())
    return store


def _external_relationship(store):
    for record in store.all_items(NAMESPACE, RELATIONSHIP):
        target = record.properties["related_spdx_element_id"]
        if (
            isinstance(target, ObjectRef)
            and target.document_uri == UPSTREAM
        ):
            return record
    raise AssertionError("sample has no external relationship")


class TestCopy(unittest.TestCase):
    """Tests for ModelCopier.copy()."""

    def test_copies_whole_document(self):
        source = _source()
        dest = YamlStore()
        count = ModelCopier().copy(dest, source, NAMESPACE)
        self.assertEqual(count, len(source))
        self.assertEqual(dest.document_uris(), [NAMESPACE])
        self.assertEqual(
            dest.to_document(NAMESPACE),
            source.to_document(NAMESPACE),
        )

    def test_external_refs_copied_first(self):
        source = _source()
        dest = YamlStore()
        ModelCopier().copy(dest, source, NAMESPACE)
        first = next(dest.all_items(NAMESPACE))
        self.assertEqual(first.type, EXTERNAL_DOC_REF)

    def test_exclude_license_details(self):
        source = _source()
        dest = RdfStore()
        ModelCopier().copy(
            dest, source, NAMESPACE,
            exclude_license_details=True,
        )
        self.assertEqual(
            list(dest.all_items(NAMESPACE, CROSS_REF)), []
        )
        document = dest.to_document(NAMESPACE)
        self.assertEqual(
            document.extracted_licensing_info[0].cross_references,
            [],
        )

    def test_license_details_kept_by_default(self):
        source = _source()
        dest = JsonStore()
        ModelCopier().copy(dest, source, NAMESPACE)
        self.assertEqual(
            len(list(dest.all_items(NAMESPACE, CROSS_REF))), 2
        )

    def test_failure_rolls_back(self):
        source = _source()
        del source._records[f"{NAMESPACE}#DocumentRef-upstream"]
        dest = JsonStore()
        with self.assertRaises(CopyFailure) as ctx:
            ModelCopier().copy(dest, source, NAMESPACE)
        self.assertEqual(ctx.exception.object_type, RELATIONSHIP)
        self.assertEqual(len(dest), 0)

    def test_failure_keeps_existing_records(self):
        source = _source()
        del source._records[f"{NAMESPACE}#DocumentRef-upstream"]
        dest = JsonStore()
        existing = ModelRecord(
            "https://example.org/other#SPDXRef-Package-x",
            PACKAGE, "SPDX-2.3", {"name": "x"},
        )
        dest.put(existing)
        with self.assertRaises(CopyFailure):
            ModelCopier().copy(dest, source, NAMESPACE)
        self.assertEqual(len(dest), 1)
        self.assertIs(dest.get(existing.object_uri), existing)

    def test_anonymous_ids_reallocated(self):
        source = _source()
        dest = JsonStore()
        taken = ModelRecord(
            f"{NAMESPACE}#__anon__1", CROSS_REF, "SPDX-2.3",
            {"url": "https://example.org/already-here"},
        )
        dest.put(taken)
        ModelCopier().copy(dest, source, NAMESPACE)

        cross_refs = list(dest.all_items(NAMESPACE, CROSS_REF))
        uris = [r.object_uri for r in cross_refs]
        self.assertEqual(len(uris), 3)
        self.assertEqual(len(set(uris)), 3)
        self.assertIs(dest.get(taken.object_uri), taken)

    def test_stores_share_no_state(self):
        source = _source()
        dest = JsonStore()
        ModelCopier().copy(dest, source, NAMESPACE)
        package_uri = f"{NAMESPACE}#SPDXRef-Package-app"
        dest.get(package_uri).properties["name"] = "changed"
        self.assertEqual(
            source.get(package_uri).properties["name"], "app"
        )


class TestCopyItem(unittest.TestCase):
    """Tests for ModelCopier.copy_item()."""

    def test_external_reference_needs_external_ref(self):
        source = _source()
        dest = JsonStore()
        record = _external_relationship(source)
        with self.assertRaises(CopyFailure) as ctx:
            ModelCopier().copy_item(
                dest, source, record, NAMESPACE
            )
        self.assertEqual(ctx.exception.object_uri, record.object_uri)
        self.assertEqual(ctx.exception.object_type, RELATIONSHIP)
        self.assertIn(record.object_uri, str(ctx.exception))
        self.assertEqual(len(dest), 0)

    def test_external_reference_after_external_ref(self):
        source = _source()
        dest = JsonStore()
        copier = ModelCopier()
        ext_ref = source.get(f"{NAMESPACE}#DocumentRef-upstream")
        copier.copy_item(dest, source, ext_ref, NAMESPACE + "#")
        record = _external_relationship(source)
        new_uri = copier.copy_item(dest, source, record, NAMESPACE)
        self.assertEqual(
            dest.get(new_uri).properties[
                "related_spdx_element_id"
            ],
            ObjectRef(f"{UPSTREAM}#SPDXRef-Package-lib"),
        )

    def test_trailing_hash_stripped(self):
        source = _source()
        dest = JsonStore()
        ext_ref = source.get(f"{NAMESPACE}#DocumentRef-upstream")
        new_uri = ModelCopier().copy_item(
            dest, source, ext_ref, NAMESPACE + "#"
        )
        self.assertEqual(
            new_uri, f"{NAMESPACE}#DocumentRef-upstream"
        )

    def test_copy_into_other_namespace(self):
        source = _source()
        dest = JsonStore()
        other = "https://example.org/spdx/copy"
        package = source.get(f"{NAMESPACE}#SPDXRef-Package-app")
        new_uri = ModelCopier().copy_item(
            dest, source, package, other
        )
        self.assertEqual(new_uri, f"{other}#SPDXRef-Package-app")
        self.assertEqual(dest.get(new_uri).type, PACKAGE)


if __name__ == "__main__":
    unittest.main()
