"""HTML entity decoding for feed text.

Only a fixed table of entities is recognised. Anything else, including
arbitrary numeric references, is left in the text untouched.
"""

# Order matters: "&amp;" goes first so double-escaped text such as
# "&amp;nbsp;" is fully decoded in a single call.
ENTITIES: tuple[tuple[str, str], ...] = (
    ("&amp;", "&"),
    ("&quot;", '"'),
    ("&apos;", "'"),
    ("&lt;", "<"),
    ("&gt;", ">"),
    ("&nbsp;", " "),
    ("&#160;", " "),
    ("&#8220;", '"'),
    ("&#8221;", '"'),
    ("&#8216;", "'"),
    ("&#8217;", "'"),
    ("&#8212;", "—"),
    ("&#8211;", "–"),
    ("&#8230;", "…"),
    ("&#8209;", "‑"),
    ("&#174;", "®"),
    ("&#169;", "©"),
    ("&#8482;", "™"),
)


def decode_entities(text: str) -> str:
    """Replace the known entities in ``text`` with their literal characters."""
    if "&" not in text:
        return text
    for entity, replacement in ENTITIES:
        text = text.replace(entity, replacement)
    return text
