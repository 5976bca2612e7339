"""
ccheck/core/parsers.py

Decoders that turn one raw document part into a generic value
(dict / list / scalar). A decoder is selected by file extension.

YAML is a superset of JSON, so .json files share the YAML decoder.
"""

import os
from typing import Any, Callable, Dict

import yaml

from ccheck.core.exceptions import UnsupportedFormatError

Decoder = Callable[[bytes], Any]


class _DocumentLoader(yaml.SafeLoader):
    """SafeLoader that keeps YAML timestamps as plain strings."""


# Timestamps stay strings so every decoded value is JSON-serialisable
# when it is handed to the policy engine as input.
_DocumentLoader.yaml_implicit_resolvers = {
    first: [r for r in resolvers if r[0] != "tag:yaml.org,2002:timestamp"]
    for first, resolvers in yaml.SafeLoader.yaml_implicit_resolvers.items()
}


def decode_yaml(data: bytes) -> Any:
    """
    Decode one YAML/JSON document.

    An empty part decodes to None. A part that still holds a second YAML
    document (a CRLF separator, or "--- # comment") is rejected rather
    than silently truncated. Raises yaml.YAMLError.
    """
    return yaml.load(data, Loader=_DocumentLoader)


_DECODERS: Dict[str, Decoder] = {
    ".yaml": decode_yaml,
    ".yml":  decode_yaml,
    ".json": decode_yaml,
}


def supported_extensions() -> list:
    return sorted(_DECODERS)


def get_decoder(path: str) -> Decoder:
    """Return the decoder for `path` or raise UnsupportedFormatError."""
    extension = os.path.splitext(path)[1]
    try:
        return _DECODERS[extension]
    except KeyError:
        raise UnsupportedFormatError(path, extension) from None
