"""
Unit tests for the Validators utility class.
"""

import os
import unittest

from report_assembler.utils.validators import Validators
from tests.test_config import BaseTestCase, TestUtils


class TestValidators(BaseTestCase):
    """Test cases for Validators class."""

    def setUp(self):
        """Set up test fixtures."""
        super().setUp()
        self.validators = Validators()

    def create_temp_file(self, filename, content="test content"):
        """Helper to create temporary files."""
        filepath = self.path(filename)
        with open(filepath, 'w') as f:
            f.write(content)
        return filepath

    def test_validate_template_path_valid(self):
        """Test template validation with a real zip package."""
        template = TestUtils.create_zip(self.path("template.docx"), {"word/document.xml": b"<x/>"})

        result = self.validators.validate_template_path(template)

        self.assertTrue(result['valid'])
        self.assertEqual(result['resolved_path'], os.path.abspath(template))
        self.assertIsNone(result['error_message'])

    def test_validate_template_path_not_exists(self):
        """Test template validation when the file doesn't exist."""
        result = self.validators.validate_template_path(self.path("nonexistent.docx"))

        self.assertFalse(result['valid'])
        self.assertIn("File not found", result['error_message'])

    def test_validate_template_path_wrong_extension(self):
        """Test template validation with wrong extension."""
        result = self.validators.validate_template_path(self.create_temp_file("template.txt"))

        self.assertFalse(result['valid'])
        self.assertIn("Not a DOCX file", result['error_message'])

    def test_validate_template_path_not_zip(self):
        """Test template validation with a .docx that is not a zip."""
        result = self.validators.validate_template_path(self.create_temp_file("template.docx"))

        self.assertFalse(result['valid'])
        self.assertIn("zip", result['error_message'])

    def test_validate_template_path_directory(self):
        """Test template validation rejects directories."""
        directory = self.path("folder.docx")
        os.makedirs(directory)

        result = self.validators.validate_template_path(directory)

        self.assertFalse(result['valid'])

    def test_validate_output_path_valid_directory(self):
        """Test output path validation with valid directory."""
        result = self.validators.validate_output_path(self.path("output.docx"))

        self.assertTrue(result['valid'])
        self.assertFalse(result['file_exists'])
        self.assertFileNotExists(self.path("output.docx"))

    def test_validate_output_path_missing_directory_not_created(self):
        """Test a missing output directory is accepted but left for packaging to create."""
        result = self.validators.validate_output_path(self.path("new", "nested", "output.docx"))

        self.assertTrue(result['valid'])
        self.assertFalse(result['directory_exists'])
        self.assertFileNotExists(self.path("new"))

    def test_validate_output_path_under_a_file(self):
        """Test an output path below an existing regular file is rejected."""
        blocker = self.create_temp_file("blocker")

        result = self.validators.validate_output_path(os.path.join(blocker, "sub", "output.docx"))

        self.assertFalse(result['valid'])
        self.assertFileNotExists(os.path.join(blocker, "sub"))

    def test_validate_output_path_existing_file(self):
        """Test an existing output file is reported."""
        existing = self.create_temp_file("output.docx")

        result = self.validators.validate_output_path(existing)

        self.assertTrue(result['valid'])
        self.assertTrue(result['file_exists'])

    def test_validate_output_path_is_directory(self):
        """Test output path validation rejects a directory."""
        directory = self.path("out.docx")
        os.makedirs(directory)

        result = self.validators.validate_output_path(directory)

        self.assertFalse(result['valid'])

    def test_validate_image_path_valid(self):
        """Test image validation reads the pixel size."""
        image = TestUtils.create_test_image(self.path("image.png"), size=(64, 32))

        result = self.validators.validate_image_path(image)

        self.assertTrue(result['valid'])
        self.assertEqual((result['width_px'], result['height_px']), (64, 32))
        self.assertEqual(result['format'], 'PNG')

    def test_validate_image_path_not_exists(self):
        """Test image validation when the file doesn't exist."""
        result = self.validators.validate_image_path(self.path("missing.png"))

        self.assertFalse(result['valid'])
        self.assertIn("Image not found", result['error_message'])

    def test_validate_image_path_unsupported_extension(self):
        """Test image validation with an unsupported extension."""
        result = self.validators.validate_image_path(self.create_temp_file("image.txt"))

        self.assertFalse(result['valid'])
        self.assertIn("Unsupported image type", result['error_message'])

    def test_validate_image_path_corrupt(self):
        """Test image validation with content Pillow cannot read."""
        result = self.validators.validate_image_path(self.create_temp_file("image.png", "garbage"))

        self.assertFalse(result['valid'])
        self.assertIn("Unreadable image", result['error_message'])


if __name__ == '__main__':
    unittest.main()
