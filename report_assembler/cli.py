"""
Report Assembler - command line interface.

Builds a multi-page DOCX report from a single-page template and a JSON list
of entries.
"""

import argparse
import json
import os

from . import EntryError, ReportEntry, TemplateAssembler, __version__
from .utils.logging_config import setup_logging, get_logger


def main(argv=None) -> int:
    """Main CLI entry point."""
    parser = argparse.ArgumentParser(
        description='Report Assembler - Build a multi-page DOCX report from a one-page template',
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  %(prog)s template.docx report.docx entries.json
  %(prog)s template.docx report.docx entries.json --work-dir ./tmp --keep-temp

Entries file:
  [
    {"header": "Scout 1", "description": "North sector", "image": "images/1.png"},
    {"header": "Scout 2", "description": "South sector", "image": "images/2.png"}
  ]
  Relative image paths are resolved against the entries file's directory.

Template:
  The first block of the template body is the page pattern. It must contain
  the text runs {{HEADER}} and {{DESCRIPTION}} and exactly one picture.
        """)

    parser.add_argument('template_file', help='Template DOCX file path')
    parser.add_argument('output_file', help='Output DOCX file path')
    parser.add_argument('entries_file', help='JSON file with the report entries')
    parser.add_argument('--work-dir', help='Scratch directory for the unpacked template (default: new temp dir)')
    parser.add_argument('--keep-temp', action='store_true', help='Keep the scratch directory for debugging')
    parser.add_argument('--verbose', '-v', '--debug', action='store_true', help='Enable verbose logging (DEBUG level)')
    parser.add_argument('--log-file', help='Log to file in addition to console')
    parser.add_argument('--version', action='version', version=f'Report Assembler v{__version__}')

    args = parser.parse_args(argv)

    setup_logging(log_file=args.log_file, verbose=args.verbose)

    logger = get_logger()
    logger.info("=" * 60)
    logger.info("Report Assembler v%s - Starting assembly", __version__)
    logger.info("=" * 60)

    try:
        entries = load_entries(args.entries_file)
    except (OSError, ValueError) as e:
        logger.error("❌ Cannot read entries from %s: %s", args.entries_file, e)
        return 1

    logger.info("Template: %s", os.path.abspath(args.template_file))
    logger.info("Output: %s", os.path.abspath(args.output_file))
    logger.info("Entries: %d", len(entries))

    assembler = TemplateAssembler(args.template_file, args.output_file, entries,
                                  work_dir=args.work_dir, keep_temp=args.keep_temp)
    try:
        assembler.assemble()
    except EntryError as e:
        entry = entries[e.index]
        logger.error("❌ Entry #%d (%s, %s) failed: %s", e.index, entry.header, entry.image_path, e.error)
        logger.debug("Failure details", exc_info=True)
        return 1
    except Exception as e:
        logger.error("❌ Report assembly failed: %s", e)
        logger.debug("Failure details", exc_info=True)
        return 1

    logger.info("=" * 60)
    logger.info("🎉 Report assembled successfully!")
    logger.info("📄 Output: %s", os.path.abspath(args.output_file))
    logger.info("=" * 60)
    return 0


def load_entries(entries_path: str) -> list:
    """
    Read report entries from a JSON file.

    Raises:
        OSError: If the file cannot be read
        ValueError: If the content is not a list of entry objects
    """
    with open(entries_path, 'r', encoding='utf-8') as f:
        data = json.load(f)

    if not isinstance(data, list):
        raise ValueError("Entries file must contain a JSON list")

    base_directory = os.path.dirname(os.path.abspath(entries_path))
    entries = []
    for index, item in enumerate(data):
        if not isinstance(item, dict):
            raise ValueError(f"Entry #{index} is not an object")
        try:
            entries.append(ReportEntry.from_dict(item, base_directory))
        except ValueError as e:
            raise ValueError(f"Entry #{index}: {e}") from e
    return entries
