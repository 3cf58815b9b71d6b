"""
Unit tests for the ContentTypes class.
"""

import unittest

from report_assembler.core.config import Config
from report_assembler.core.exceptions import MalformedMarkupError
from report_assembler.document.content_types import ContentTypes
from tests.test_config import BaseTestCase

CT_NS = 'http://schemas.openxmlformats.org/package/2006/content-types'

SAMPLE = (f'<?xml version="1.0" encoding="UTF-8" standalone="yes"?>\n'
          f'<Types xmlns="{CT_NS}">'
          f'<Default Extension="rels" ContentType="application/vnd.openxmlformats-package.relationships+xml"/>'
          f'<Default Extension="PNG" ContentType="image/png"/>'
          f'<Override PartName="/word/document.xml" '
          f'ContentType="application/vnd.openxmlformats-officedocument.wordprocessingml.document.main+xml"/>'
          f'</Types>')


class TestContentTypes(BaseTestCase):
    """Test cases for ContentTypes class."""

    def setUp(self):
        super().setUp()
        self.ct_path = self.path("[Content_Types].xml")
        with open(self.ct_path, 'w', encoding='utf-8') as f:
            f.write(SAMPLE)
        self.content_types = ContentTypes.load(self.ct_path)

    def test_get_default_case_insensitive(self):
        """Test extension lookup ignores case and a leading dot."""
        self.assertEqual(self.content_types.get_default('.png'), 'image/png')
        self.assertIsNone(self.content_types.get_default('jpg'))

    def test_ensure_default_existing(self):
        """Test a declared extension is left alone."""
        self.assertFalse(self.content_types.ensure_default('.png', 'image/x-other'))
        self.assertEqual(self.content_types.get_default('png'), 'image/png')

    def test_ensure_default_new_saved(self):
        """Test a new extension is added and persisted."""
        self.assertTrue(self.content_types.ensure_default('.jpg', Config.get_content_type('.jpg')))
        self.content_types.save()

        reloaded = ContentTypes.load(self.ct_path)
        self.assertEqual(reloaded.get_default('jpg'), 'image/jpeg')

    def test_load_wrong_root(self):
        """Test a part that is not a content type list is rejected."""
        other = self.path("other.xml")
        with open(other, 'w') as f:
            f.write('<Relationships/>')

        with self.assertRaises(MalformedMarkupError):
            ContentTypes.load(other)


if __name__ == '__main__':
    unittest.main()
