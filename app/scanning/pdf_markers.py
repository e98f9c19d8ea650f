"""PDF name patterns that reveal active, hidden or interactive content."""

import re

SCRIPT = r"/(?:JS|JavaScript)\b"
ATTACHMENT = r"/(?:EmbeddedFiles?|RichMedia)\b"
AUTO_EXECUTION = r"/(?:Launch|AA)\b"
OPEN_ACTION_SCRIPT = r"/OpenAction\s*<<[^>]*?/S\s*/(?:JavaScript|Launch)\b"
ACTION_SCRIPT = r"/S\s*/(?:JavaScript|Launch)\b"
EXTERNAL_LINK = r"/(?:URI|SubmitForm|GoToR)\b"
FORM = r"/(?:AcroForm|XFA)\b"
ENCRYPT = r"/Encrypt\b"

_NAME_ESCAPE_RE = re.compile(rb"/[^\s/<>\[\]()]*#[0-9A-Fa-f]{2}[^\s/<>\[\]()]*")
_HEX_ESCAPE_RE = re.compile(rb"#([0-9A-Fa-f]{2})")


def unescape_names(data: bytes) -> bytes:
    """Decode ``#xx`` escapes inside PDF names, e.g. ``/J#61vaScript``."""

    def _decode(match: re.Match[bytes]) -> bytes:
        return _HEX_ESCAPE_RE.sub(lambda m: bytes([int(m.group(1), 16)]), match.group(0))

    return _NAME_ESCAPE_RE.sub(_decode, data)
