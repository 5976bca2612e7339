"""
ccheck/core/loader.py

Document Loader.

    path -> raw bytes -> segments split on "\n---\n" -> decoded parts

A file without the separator is a single part. Segment order is the
order parts are evaluated in. Any failure here is scoped to the file.
"""

import os
from dataclasses import dataclass
from typing import Any, List

import structlog
import yaml

from ccheck.core.exceptions import DocumentParseError, FileAccessError
from ccheck.core.parsers import get_decoder

logger = structlog.get_logger()

# A line consisting of exactly "---" between two newlines.
DOCUMENT_SEPARATOR = b"\n---\n"


@dataclass
class LoadedDocument:
    """All decoded parts of one input file."""
    path:  str          # absolute
    parts: List[Any]

    def __len__(self) -> int:
        return len(self.parts)


def read_file(path: str) -> bytes:
    """Read the whole file or raise FileAccessError naming it."""
    try:
        with open(path, "rb") as f:
            return f.read()
    except OSError as e:
        raise FileAccessError(path, e.strerror or str(e)) from e


def split_documents(data: bytes) -> List[bytes]:
    """Split raw content into document segments, preserving order."""
    return data.split(DOCUMENT_SEPARATOR)


def load_document(path: str) -> LoadedDocument:
    """
    Read, split and decode one input file.

    The decoder is chosen before the file is read so an unsupported
    extension fails without touching the file system.

    Raises:
        UnsupportedFormatError, FileAccessError, DocumentParseError
    """
    abs_path = os.path.abspath(path)
    decode   = get_decoder(abs_path)
    segments = split_documents(read_file(abs_path))

    parts = []
    for index, segment in enumerate(segments):
        try:
            parts.append(decode(segment))
        except yaml.YAMLError as e:
            raise DocumentParseError(abs_path, index, str(e)) from e

    logger.debug("document_loaded", path=abs_path, parts=len(parts))
    return LoadedDocument(path=abs_path, parts=parts)
