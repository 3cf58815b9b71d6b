"""
Template assembly orchestration.

This module contains the TemplateAssembler class, which turns a single-page
DOCX template plus a list of report entries into a multi-page document: the
first block of the template body is cloned once per entry, its tokens are
substituted, the entry image is embedded and referenced, and a page break
follows every page.
"""

import os
import posixpath
from typing import Dict, List, Optional, Sequence

from docx.oxml.ns import qn
from lxml import etree

from .config import Config
from .exceptions import (DuplicateIdError, EntryError, ReportAssemblerError,
                         StructureError, ContainerFormatError)
from .models import ReportEntry
from ..document.container import ContainerCodec
from ..document.content_types import ContentTypes
from ..document.markup_tree import MarkupTree
from ..document.relationships import RelationshipManifest, package_references
from ..utils.file_manager import WorkingTree
from ..utils.logging_config import get_assembler_logger
from ..utils.validators import Validators

R_NS = Config.NAMESPACES['r']


class TemplateAssembler:
    """Main orchestrator class for report assembly."""

    def __init__(self, template_path: str, output_path: str, entries: Sequence[ReportEntry],
                 work_dir: Optional[str] = None, keep_temp: bool = False):
        """
        Initialize the assembler.

        Args:
            template_path: Path to the single-page template DOCX
            output_path: Path for the assembled DOCX
            entries: Report entries, one output page each, in page order
            work_dir: Scratch directory for the unpacked package. Must not be
                shared with another running assembly. Defaults to a fresh temp dir.
            keep_temp: Keep the scratch directory for debugging
        """
        self.template_path = str(template_path)
        self.output_path = str(output_path)
        self.entries = list(entries)
        self.logger = get_assembler_logger()

        # Components
        self.codec = ContainerCodec()
        self.validators = Validators()
        self.working_tree = WorkingTree(work_dir, keep_temp)

        self._reset_state()

    def run(self) -> bool:
        """Run the complete assembly, logging any failure instead of raising."""
        try:
            self.assemble()
            self.logger.info("=== Report Assembly Successful ===")
            return True
        except EntryError as e:
            self.logger.error("❌ Failed while processing entry #%d: %s", e.index, e.error, exc_info=True)
            return False
        except (ReportAssemblerError, OSError) as e:
            self.logger.error("❌ Report assembly failed: %s", e, exc_info=True)
            return False

    def assemble(self) -> None:
        """
        Run the complete assembly.

        Raises:
            ContainerFormatError, MalformedMarkupError, StructureError,
            DuplicateIdError: On an invalid template or manifest
            EntryError: When a single entry cannot be processed; carries its index
            OSError: On filesystem failures
        """
        self._reset_state()
        self._validate_inputs()
        with self.working_tree:
            self._extract_template()
            self._capture_template_block()
            self._process_entries()
            self._write_parts()
            self._repack()

    def _reset_state(self) -> None:
        """Clear process state so the same assembler can run again."""
        self.document = None
        self.manifest = None
        self.body = None
        self.template_block = None
        self.section_properties = None
        self.image_sizes: Dict[int, tuple] = {}
        self.allocated_ids: List[str] = []
        self.media_extensions = set()

    def _validate_inputs(self) -> None:
        """[Stage 1/6: Input Validation] Check template, output location and entry images."""
        self.logger.info("[Stage 1/6: Input Validation]")

        template_result = self.validators.validate_template_path(self.template_path)
        if not template_result['valid']:
            raise ContainerFormatError(template_result['error_message'])
        self.logger.info("  > Template is valid (%.1f MB).", template_result['file_size_mb'])

        output_result = self.validators.validate_output_path(self.output_path)
        if not output_result['valid']:
            raise OSError(output_result['error_message'])
        if output_result['file_exists']:
            self.logger.warning("  > ⚠️ Output file exists and will be overwritten.")

        for index, entry in enumerate(self.entries):
            image_result = self.validators.validate_image_path(str(entry.image_path))
            if not image_result['valid']:
                error = OSError(image_result['error_message'])
                raise EntryError(index, error) from error
            self.image_sizes[index] = (image_result['width_px'], image_result['height_px'])
        self.logger.info("  > %d entries validated.", len(self.entries))

    def _extract_template(self) -> None:
        """[Stage 2/6: Extraction] Unpack the template into the working tree."""
        self.logger.info("[Stage 2/6: Extraction]")
        names = self.codec.extract(self.template_path, self.working_tree.path)
        self.document = MarkupTree.parse(self.working_tree.resolve(Config.DOCUMENT_PART))
        self.manifest = RelationshipManifest.load(self.working_tree.resolve(Config.RELATIONSHIPS_PART))
        self.logger.info("  > Extracted %d parts; manifest has %d relationships.", len(names), len(self.manifest))

    def _capture_template_block(self) -> None:
        """[Stage 3/6: Template Capture] Save the first body block and clear the body."""
        self.logger.info("[Stage 3/6: Template Capture]")
        self.body = self.document.root.find(qn('w:body'))
        if self.body is None:
            raise StructureError(f"No <w:body> in {Config.DOCUMENT_PART}")

        children = [child for child in self.body if isinstance(child.tag, str)]
        if children and children[-1].tag == qn('w:sectPr'):
            self.section_properties = children.pop()
        if not children:
            raise StructureError("Template body has no content blocks to use as a page pattern")

        self.template_block = MarkupTree.clone(children[0])
        for token in (Config.HEADER_TOKEN, Config.DESCRIPTION_TOKEN):
            if next(MarkupTree.find_text(self.template_block, token), None) is None:
                # Tokens split across runs by the editor are not matched
                self.logger.warning("  > ⚠️ Token %s not found as a whole text run in the template block.", token)

        for child in list(self.body):
            self.body.remove(child)
        self.logger.info("  > Template block captured (<%s>), body cleared.", etree.QName(self.template_block).localname)

    def _process_entries(self) -> None:
        """[Stage 4/6: Entry Processing] Clone, fill and append one page per entry."""
        self.logger.info("[Stage 4/6: Entry Processing]")
        if not self.entries:
            self.logger.warning("  > ⚠️ No entries supplied. The document body will be empty.")
        for index, entry in enumerate(self.entries):
            try:
                self._add_entry(index, entry)
            except (ReportAssemblerError, OSError) as e:
                raise EntryError(index, e) from e
        self.logger.info("  > %d pages assembled.", len(self.entries))

    def _add_entry(self, index: int, entry: ReportEntry) -> None:
        self.logger.info("  > Entry #%d: %s", index, entry.header)
        block = MarkupTree.clone(self.template_block)

        # Collect both token sets before writing, so a value equal to a token is left alone
        header_nodes = list(MarkupTree.find_text(block, Config.HEADER_TOKEN))
        description_nodes = list(MarkupTree.find_text(block, Config.DESCRIPTION_TOKEN))
        for node in header_nodes:
            MarkupTree.set_text(node, entry.header)
        for node in description_nodes:
            MarkupTree.set_text(node, entry.description)

        rel_id = self.manifest.allocate_id()
        counter = RelationshipManifest.counter_of(rel_id)
        extension = os.path.splitext(str(entry.image_path))[1].lower()
        media_name = Config.get_media_name(counter, extension)
        media_part = f"{Config.MEDIA_DIR}/{media_name}"
        if os.path.exists(self.working_tree.resolve(media_part)):
            raise DuplicateIdError(f"Media file {media_part} already exists in the template")
        self.working_tree.copy_file(str(entry.image_path), media_part)
        self.manifest.add_entry(rel_id, Config.MEDIA_TARGET_PREFIX + media_name,
                                Config.IMAGE_RELATIONSHIP_TYPE)

        blips = list(block.iter(qn('a:blip')))
        if not blips:
            raise StructureError("Template block has no image placeholder (<a:blip>)")
        if len(blips) > 1:
            raise StructureError(f"Template block has {len(blips)} image placeholders, expected exactly one")
        MarkupTree.set_attribute(blips[0], 'r:embed', rel_id)
        self._refresh_drawing(block, counter, self.image_sizes.get(index))

        self.body.append(block)
        self._append_page_break()

        self.allocated_ids.append(rel_id)
        self.media_extensions.add(extension)
        self.logger.debug("    • header runs: %d, description runs: %d, image: %s -> %s",
                          len(header_nodes), len(description_nodes), media_part, rel_id)

    def _refresh_drawing(self, block: etree._Element, counter: int, image_size: Optional[tuple]) -> None:
        """Give the cloned drawing a unique id and fit its extent to the new image."""
        for doc_pr in block.iter(qn('wp:docPr')):
            doc_pr.set('id', str(counter))
            doc_pr.set('name', f"Picture {counter}")

        if not Config.FIT_IMAGE_TO_PLACEHOLDER or not image_size:
            return
        width_px, height_px = image_size
        extent = next(block.iter(qn('wp:extent')), None)
        if extent is None or not width_px or not height_px:
            return

        try:
            box_cx = int(extent.get('cx', '0'))
            box_cy = int(extent.get('cy', '0'))
        except ValueError as e:
            raise StructureError(f"Image placeholder has a non-numeric extent: {e}") from e
        if box_cx <= 0 or box_cy <= 0:
            return

        # Use the smaller scale to maintain aspect ratio inside the template box
        scale = min(box_cx / width_px, box_cy / height_px)
        new_cx = str(int(round(width_px * scale)))
        new_cy = str(int(round(height_px * scale)))
        extent.set('cx', new_cx)
        extent.set('cy', new_cy)
        for xfrm in block.iter(qn('a:xfrm')):
            ext = xfrm.find(qn('a:ext'))
            if ext is not None:
                ext.set('cx', new_cx)
                ext.set('cy', new_cy)

    def _append_page_break(self) -> etree._Element:
        paragraph = etree.SubElement(self.body, qn('w:p'))
        run = etree.SubElement(paragraph, qn('w:r'))
        br = etree.SubElement(run, qn('w:br'))
        br.set(qn('w:type'), 'page')
        return paragraph

    def _write_parts(self) -> None:
        """[Stage 5/6: Serialization] Write document, relationships and content types."""
        self.logger.info("[Stage 5/6: Serialization]")
        if self.section_properties is not None:
            self.body.append(self.section_properties)

        if Config.PRUNE_UNUSED_IMAGES:
            self._prune_unused_images()

        content_types = ContentTypes.load(self.working_tree.resolve(Config.CONTENT_TYPES_PART))
        for extension in sorted(self.media_extensions):
            if content_types.ensure_default(extension, Config.get_content_type(extension)):
                self.logger.debug("  > Registered content type for .%s", extension.lstrip('.'))

        self.document.serialize()
        self.manifest.save()
        content_types.save()
        self.logger.info("  > Document, relationships and content types written.")

    def _prune_unused_images(self) -> None:
        """Drop image relationships (and their media) no longer referenced by the body."""
        referenced = set()
        for element in self.document.root.iter():
            if not isinstance(element.tag, str):
                continue
            for name, value in element.attrib.items():
                if name.startswith(f'{{{R_NS}}}'):
                    referenced.add(value)

        unused = [rel_id for rel_id in self.manifest.ids_of_type(Config.IMAGE_RELATIONSHIP_TYPE)
                  if rel_id not in referenced and not self.manifest.is_external(rel_id)]
        if not unused:
            return

        # Headers, footers and other parts may share the same media file
        shared = package_references(self.working_tree.path, skip=[Config.RELATIONSHIPS_PART])
        for rel_id in unused:
            target = self.manifest.remove_entry(rel_id)
            media_part = posixpath.normpath(posixpath.join(posixpath.dirname(Config.DOCUMENT_PART), target))
            still_used = set(self.manifest.resolved_targets(Config.DOCUMENT_PART)) | shared
            if media_part in still_used:
                self.logger.debug("  > Kept template image %s, still referenced elsewhere (%s dropped)",
                                  media_part, rel_id)
                continue
            media_path = self.working_tree.resolve(media_part)
            if os.path.isfile(media_path):
                os.remove(media_path)
            self.logger.debug("  > Removed unused template image %s (%s)", target, rel_id)

    def _repack(self) -> None:
        """[Stage 6/6: Packaging] Zip the working tree into the output document."""
        self.logger.info("[Stage 6/6: Packaging]")
        try:
            self.codec.repack(self.working_tree.path, self.output_path)
        except OSError:
            if os.path.exists(self.output_path):
                os.remove(self.output_path)
            raise
        self.logger.info("  > Final report is ready: %s", self.output_path)


def generate(template_path: str, output_path: str, entries: Sequence[ReportEntry],
             work_dir: Optional[str] = None, keep_temp: bool = False) -> bool:
    """Assemble ``entries`` into ``output_path`` from ``template_path``; return success."""
    return TemplateAssembler(template_path, output_path, entries, work_dir, keep_temp).run()
