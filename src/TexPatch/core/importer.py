"""Build pixel data for a texture from an external image file."""

from .codec import PixelCodec
from .records import TextureRecord
from .results import CodecResult, guarded


class ReplacementImageImporter:
    """Stateless delegate to the codec's image-file encoder.

    Must be invoked after overrides are applied so the record's target
    format is already in effect.
    """

    def __init__(self, codec: PixelCodec):
        self.codec = codec

    def import_image(self, record: TextureRecord, path: str) -> CodecResult[bytes]:
        return guarded("encode_image", self.codec.encode_image, record, path)
