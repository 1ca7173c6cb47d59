from .extractor import (
    binarize,
    bounding_box,
    crop,
    extract_content,
    find_regions,
    significant,
    to_intensity,
)

__all__ = [
    "to_intensity",
    "binarize",
    "find_regions",
    "significant",
    "bounding_box",
    "crop",
    "extract_content",
]
