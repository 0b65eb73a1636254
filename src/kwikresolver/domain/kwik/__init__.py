"""Kwik obfuscation decoding, page extraction and URL validation."""

from __future__ import annotations

from .decoder import convert_base, decode_segment
from .extractor import extract_link_or_params, rewrite_metadata_path
from .validator import KWIK_DOMAINS, is_valid_target_url

__all__ = [
    "KWIK_DOMAINS",
    "convert_base",
    "decode_segment",
    "extract_link_or_params",
    "is_valid_target_url",
    "rewrite_metadata_path",
]
