"""
Unit tests for the ContainerCodec class.
"""

import os
import unittest
import zipfile

from report_assembler.core.exceptions import ContainerFormatError
from report_assembler.document.container import ContainerCodec
from tests.test_config import BaseTestCase, TestUtils

PACKAGE_FILES = {
    "[Content_Types].xml": b"<Types/>",
    "_rels/.rels": b"<Relationships/>",
    "word/document.xml": b"<w:document/>",
    "word/media/image1.png": b"\x89PNG fake",
}


class TestContainerCodec(BaseTestCase):
    """Test cases for ContainerCodec class."""

    def setUp(self):
        super().setUp()
        self.codec = ContainerCodec()
        self.archive = TestUtils.create_zip(self.path("package.docx"), PACKAGE_FILES)
        self.tree = self.path("tree")

    def test_extract(self):
        """Test every entry lands at its relative path."""
        names = self.codec.extract(self.archive, self.tree)

        self.assertEqual(sorted(names), sorted(PACKAGE_FILES))
        for name, data in PACKAGE_FILES.items():
            with open(os.path.join(self.tree, *name.split('/')), 'rb') as f:
                self.assertEqual(f.read(), data)

    def test_extract_overwrites_existing_files(self):
        """Test extraction replaces files already in the destination."""
        os.makedirs(os.path.join(self.tree, "word"))
        with open(os.path.join(self.tree, "word", "document.xml"), 'wb') as f:
            f.write(b"old")

        self.codec.extract(self.archive, self.tree)

        with open(os.path.join(self.tree, "word", "document.xml"), 'rb') as f:
            self.assertEqual(f.read(), b"<w:document/>")

    def test_extract_missing_archive(self):
        """Test a missing archive raises ContainerFormatError."""
        with self.assertRaises(ContainerFormatError):
            self.codec.extract(self.path("missing.docx"), self.tree)

    def test_extract_not_a_zip(self):
        """Test a non-zip file raises ContainerFormatError."""
        bogus = self.path("bogus.docx")
        with open(bogus, 'wb') as f:
            f.write(b"this is not a zip archive")

        with self.assertRaises(ContainerFormatError):
            self.codec.extract(bogus, self.tree)

    def test_extract_rejects_escaping_entries(self):
        """Test entries pointing outside the destination are refused."""
        evil = self.path("evil.docx")
        with zipfile.ZipFile(evil, 'w') as archive:
            archive.writestr(zipfile.ZipInfo("../escaped.txt"), b"outside")

        with self.assertRaises(ContainerFormatError):
            self.codec.extract(evil, self.tree)
        self.assertFileNotExists(self.path("escaped.txt"))

    def test_repack(self):
        """Test repacking keeps relative paths and content."""
        self.codec.extract(self.archive, self.tree)
        output = self.path("repacked.docx")

        self.codec.repack(self.tree, output)

        with zipfile.ZipFile(output) as archive:
            self.assertEqual(sorted(archive.namelist()), sorted(PACKAGE_FILES))
            for name, data in PACKAGE_FILES.items():
                self.assertEqual(archive.read(name), data)

    def test_repack_writes_content_types_first(self):
        """Test the content types part is the first archive entry."""
        self.codec.extract(self.archive, self.tree)
        output = self.path("repacked.docx")

        names = self.codec.repack(self.tree, output)

        self.assertEqual(names[0], "[Content_Types].xml")
        self.assertEqual(TestUtils.part_names(output)[0], "[Content_Types].xml")

    def test_repack_creates_output_directory(self):
        """Test missing parent directories of the output are created."""
        self.codec.extract(self.archive, self.tree)
        output = self.path("nested", "dir", "out.docx")

        self.codec.repack(self.tree, output)

        self.assertFileExists(output)

    def test_repack_missing_source(self):
        """Test repacking a missing directory raises OSError."""
        with self.assertRaises(OSError):
            self.codec.repack(self.path("nowhere"), self.path("out.docx"))


if __name__ == '__main__':
    unittest.main()
