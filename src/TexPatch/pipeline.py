"""Apply one settings override to a batch of texture assets.

`TextureEditPipeline` reads each record once, decides whether its pixels must
round-trip through the codec, applies the override, produces new pixel data
when needed, and writes the record back once. Failures are recorded per asset
and never abort the batch.
"""

import logging
import os
import time
from typing import Iterable, List, Optional

from tqdm import tqdm

from .config import EditorConfig
from .core import (
    AssetHandle, AssetOutcome, BatchReport, ErrorAggregator, OutcomeKind,
    PixelCodec, RecordFormatError, ReplacementImageImporter, SettingsOverride,
    TextureRecord, Workspace, guarded, needs_reencode,
)

logger = logging.getLogger("texpatch.pipeline")


class TextureEditPipeline:
    """Sequential read -> decide -> decode -> override -> encode -> write loop."""

    def __init__(
        self,
        workspace: Workspace,
        config: Optional[EditorConfig] = None,
        codec: Optional[PixelCodec] = None,
        importer: Optional[ReplacementImageImporter] = None,
    ):
        self.workspace = workspace
        self.config = config or EditorConfig()
        self.codec = codec or PixelCodec(max_image_pixels=self.config.max_image_pixels)
        self.importer = importer or ReplacementImageImporter(self.codec)

    def run(
        self,
        selection: Iterable[AssetHandle],
        override: SettingsOverride,
        errors: Optional[ErrorAggregator] = None,
    ) -> BatchReport:
        """Edit every asset in ``selection`` in order and return the report."""
        if errors is None:
            errors = ErrorAggregator(self.config.max_error_lines)
        report = BatchReport()
        assets = list(selection)
        start_time = time.time()
        logger.info(
            "Editing %d texture(s) with override fields: %s",
            len(assets), ", ".join(override.changes()) or "(none)",
        )

        for asset in tqdm(assets, desc="Editing textures", unit="asset",
                          disable=not self.config.show_progress):
            for outcome in self.process_asset(asset, override):
                report.add(outcome)
                errors.record_outcome(outcome)

        elapsed = time.time() - start_time
        failed = len({o.asset for o in report.failures})
        if failed:
            logger.warning(
                "Texture edit finished in %.1fs -- %d/%d asset(s) had errors",
                elapsed, failed, len(assets),
            )
        else:
            logger.info("Texture edit complete in %.1fs (%d asset(s))", elapsed, len(assets))
        return report

    def process_asset(self, asset: AssetHandle, override: SettingsOverride) -> List[AssetOutcome]:
        """Run the full edit cycle for one asset and return its outcome(s)."""
        name = asset.display_name

        def fail(kind: OutcomeKind, message: str) -> AssetOutcome:
            logger.warning("[%s]: %s", name, message)
            return AssetOutcome(asset=name, kind=kind, message=message)

        # Read
        read = guarded("read_fields", self.workspace.read_fields, asset)
        if not read.ok or read.value is None:
            return [fail(OutcomeKind.READ_FAILURE, "failed to read")]
        fields = read.value

        # Interpret
        try:
            record = TextureRecord.from_fields(fields)
        except RecordFormatError as exc:
            return [fail(OutcomeKind.READ_FAILURE, f"failed to read: {exc}")]

        # Decide
        reencode = needs_reencode(record.texture_format, override)
        logger.debug("%s: format %d, reencode=%s", name, record.texture_format, reencode)

        # Conditional decode
        buffer = None
        if reencode:
            fetched = guarded("fetch_encoded", self.codec.fetch_encoded,
                              record, asset.container_path)
            if not fetched.ok:
                return [fail(OutcomeKind.DECODE_FAILURE,
                             f"failed to decode for reencoding: {fetched.reason}")]
            decoded = guarded("decode_raw", self.codec.decode_raw, record, fetched.value)
            if decoded.ok:
                buffer = decoded.value
            else:
                # Metadata edits still go ahead; only the re-encode is dropped.
                logger.warning(
                    "[%s]: raw decode failed (%s); keeping existing pixel data",
                    name, decoded.reason,
                )

        # Apply overrides
        applied = override.apply_to(record)
        if applied:
            logger.debug("%s: applied %s", name, ", ".join(applied))

        # Produce new pixel data
        outcomes: List[AssetOutcome] = []
        image_path = override.new_image_path
        if image_path and not os.path.isfile(image_path):
            logger.warning("[%s]: replacement image not found, skipping import: %s",
                           name, image_path)
            image_path = None
        if image_path:
            record.mip_count = 1
            record.mip_map = False
            imported = self.importer.import_image(record, image_path)
            if not imported.ok:
                outcomes.append(fail(OutcomeKind.IMPORT_FAILURE,
                                     f"failed to import new texture: {imported.reason}"))
        elif reencode and buffer is not None:
            record.mip_count = 1
            record.mip_map = False
            encoded = guarded(
                "encode_raw", self.codec.encode_raw,
                record, buffer, record.width, record.height, self.config.reencode_quality,
            )
            buffer = None
            if not encoded.ok:
                outcomes.append(fail(OutcomeKind.REENCODE_FAILURE,
                                     f"failed to reencode: {encoded.reason}"))

        # Write
        written = guarded("update_asset", self._commit, asset, record, fields)
        if not written.ok:
            outcomes.append(fail(OutcomeKind.WRITE_FAILURE, f"failed to write: {written.reason}"))

        if not outcomes:
            outcomes.append(AssetOutcome(asset=name, kind=OutcomeKind.SUCCESS))
        return outcomes

    def _commit(self, asset: AssetHandle, record: TextureRecord, fields: dict) -> None:
        record.write_to(fields)
        self.workspace.update_asset(asset, fields)
