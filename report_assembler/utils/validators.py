"""
Validation utilities for template, output and image paths.
"""

import os
import zipfile
from typing import Any, Dict

from PIL import Image, UnidentifiedImageError

from ..core.config import Config


class Validators:
    """Utility class for validating files and paths."""

    @staticmethod
    def validate_template_path(template_path: str) -> Dict[str, Any]:
        """
        Validate a template DOCX path.

        Args:
            template_path: Path to the template package

        Returns:
            Dict with validation results
        """
        result = {
            'valid': False,
            'resolved_path': None,
            'error_message': None,
            'file_size_mb': 0.0
        }

        resolved_path = os.path.abspath(template_path)

        if not os.path.exists(resolved_path):
            result['error_message'] = f"File not found: {resolved_path}"
            return result

        if not os.path.isfile(resolved_path):
            result['error_message'] = f"Path is not a file: {resolved_path}"
            return result

        if not any(resolved_path.lower().endswith(ext) for ext in Config.SUPPORTED_TEMPLATE_EXTENSIONS):
            result['error_message'] = f"Not a DOCX file: {resolved_path}"
            return result

        if not zipfile.is_zipfile(resolved_path):
            result['error_message'] = f"Not a valid zip package: {resolved_path}"
            return result

        try:
            result['file_size_mb'] = os.path.getsize(resolved_path) / (1024 * 1024)
        except OSError:
            result['file_size_mb'] = 0.0

        result['valid'] = True
        result['resolved_path'] = resolved_path
        return result

    @staticmethod
    def validate_output_path(output_path: str) -> Dict[str, Any]:
        """
        Validate an output file path.

        Args:
            output_path: Desired output file path

        Returns:
            Dict with validation results
        """
        result = {
            'valid': False,
            'resolved_path': None,
            'error_message': None,
            'directory_exists': False,
            'file_exists': False
        }

        resolved_path = os.path.abspath(output_path)
        directory = os.path.dirname(resolved_path)

        result['directory_exists'] = os.path.isdir(directory)

        if os.path.isdir(resolved_path):
            result['error_message'] = f"Output path is a directory: {resolved_path}"
            return result

        result['file_exists'] = os.path.exists(resolved_path)

        # Missing directories are created at packaging time; the nearest existing one must be writable
        existing = directory
        while not os.path.exists(existing):
            parent = os.path.dirname(existing)
            if parent == existing:
                break
            existing = parent

        if not os.path.isdir(existing):
            result['error_message'] = f"Output location is not a directory: {existing}"
            return result

        if not os.access(existing, os.W_OK):
            result['error_message'] = f"Cannot write to output location: {existing}"
            return result

        result['valid'] = True
        result['resolved_path'] = resolved_path
        return result

    @staticmethod
    def validate_image_path(image_path: str) -> Dict[str, Any]:
        """
        Validate an entry image.

        Args:
            image_path: Path to a rendered image file

        Returns:
            Dict with validation results including pixel size and format
        """
        result = {
            'valid': False,
            'resolved_path': None,
            'error_message': None,
            'width_px': 0,
            'height_px': 0,
            'format': None
        }

        resolved_path = os.path.abspath(image_path)

        if not os.path.exists(resolved_path):
            result['error_message'] = f"Image not found: {resolved_path}"
            return result

        if not os.path.isfile(resolved_path):
            result['error_message'] = f"Path is not a file: {resolved_path}"
            return result

        extension = os.path.splitext(resolved_path)[1].lower()
        if extension not in Config.SUPPORTED_IMAGE_EXTENSIONS:
            result['error_message'] = f"Unsupported image type '{extension}': {resolved_path}"
            return result

        try:
            with Image.open(resolved_path) as img:
                result['width_px'], result['height_px'] = img.size
                result['format'] = img.format
                img.verify()
        except (UnidentifiedImageError, OSError, SyntaxError) as e:
            result['error_message'] = f"Unreadable image {resolved_path}: {e}"
            return result

        result['valid'] = True
        result['resolved_path'] = resolved_path
        return result
