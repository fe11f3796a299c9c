"""Parse and serialize pillar documents.

A document is the mapping PyYAML's safe loader produces for a `.sls` file:
nested ``dict``/``list`` values with string leaves. Documents are scanned
for ``include:`` directives before they are handed to the YAML parser, as
Salt resolves includes at render time and we must not try to.

"""

import io

import yaml

from securepillar import EmptyDocumentError, IncludeDetectedError, ParseError

INCLUDE_TOKEN = "include:"
RENDERER_HEADER = "#!yaml|gpg\n\n"


def scan_for_includes(data, filename="<stdin>"):
    """Raise IncludeDetectedError if any line contains an include."""
    if isinstance(data, bytes):
        data = data.decode("utf-8", errors="replace")
    for lineno, line in enumerate(io.StringIO(data), start=1):
        if INCLUDE_TOKEN in line:
            raise IncludeDetectedError.from_context(filename, lineno)


def parse(data, filename="<stdin>"):
    """Return the document contained in `data`.

    Empty input results in an empty document.

    """
    scan_for_includes(data, filename)
    try:
        document = yaml.safe_load(data)
    except yaml.YAMLError as e:
        raise ParseError.from_context(filename, e) from e
    if document is None:
        return {}
    if not isinstance(document, dict):
        raise ParseError.from_context(
            filename,
            f"expected a mapping at the top level, "
            f"got {type(document).__name__}",
        )
    return document


class PillarDumper(yaml.SafeDumper):
    pass


def _represent_str(dumper, value):
    # Armored PGP messages are only readable as literal blocks.
    if "\n" in value:
        return dumper.represent_scalar(
            "tag:yaml.org,2002:str", value, style="|"
        )
    return dumper.represent_scalar("tag:yaml.org,2002:str", value)


PillarDumper.add_representer(str, _represent_str)


def dump(data):
    return yaml.dump(
        data,
        Dumper=PillarDumper,
        default_flow_style=False,
        allow_unicode=True,
    )


def format_buffer(data, header=True, filename="<stdin>"):
    """Serialize `data`, prefixed with the gpg renderer line if requested."""
    if not data:
        raise EmptyDocumentError.from_context(filename)
    out = dump(data)
    if header:
        return RENDERER_HEADER + out
    return out
