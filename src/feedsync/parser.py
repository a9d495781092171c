"""Streaming RSS 2.0 / Atom parser.

The document is walked with SAX callbacks instead of being loaded into a
tree, so large feeds are handled chunk by chunk as they arrive. RSS
``<item>`` and Atom ``<entry>`` elements are treated the same way once
entered: character data is collected into per-field buffers that are reset
at the start of every item.
"""

import logging
import xml.sax
from xml.sax.handler import ContentHandler, feature_external_ges, feature_external_pes

from .dates import parse_date_or_now
from .entities import decode_entities
from .errors import ParsingError
from .models import ParsedFeed, ParsedItem
from .sanitizer import sanitize_html

logger = logging.getLogger(__name__)

ITEM_ELEMENTS = frozenset({"item", "entry"})
DESCRIPTION_ELEMENTS = frozenset({"description", "summary", "content:encoded", "content"})
DATE_ELEMENTS = frozenset({"pubDate", "published", "updated"})
MEDIA_ELEMENTS = frozenset({"media:content", "media:thumbnail"})


class _FeedHandler(ContentHandler):
    def __init__(self):
        super().__init__()
        self.feed_title = ""
        self.items: list[ParsedItem] = []
        self._feed_title_done = False
        self._current_element = ""
        self._pending: list[str] = []
        self._in_item = False
        self._reset_item()

    def _reset_item(self) -> None:
        self._title = ""
        self._link = ""
        self._href: str | None = None
        self._href_preferred = False
        self._description = ""
        self._date = ""
        self._date_done = False
        self._image_url: str | None = None

    def startElement(self, name, attrs):
        self._flush_text()
        self._current_element = name

        if name in ITEM_ELEMENTS:
            self._in_item = True
            self._reset_item()
            return

        if not self._in_item:
            return

        if self._image_url is None:
            if name in MEDIA_ELEMENTS and attrs.get("url"):
                self._image_url = attrs.get("url")
            elif name == "enclosure" and attrs.get("type", "").startswith("image/"):
                self._image_url = attrs.get("url")

        if name == "link" and attrs.get("href"):
            # Atom entries often carry several links; the alternate one is
            # the article itself.
            preferred = attrs.get("rel", "alternate") == "alternate"
            if self._href is None or (preferred and not self._href_preferred):
                self._href = attrs.get("href")
                self._href_preferred = preferred

    def characters(self, content):
        # expat splits text at entity references and at chunk boundaries;
        # collect it until the next tag so each text run is judged whole.
        self._pending.append(content)

    def _flush_text(self) -> None:
        content = "".join(self._pending)
        self._pending.clear()
        if not content.strip():
            return

        element = self._current_element
        if not self._in_item:
            if element == "title" and not self._feed_title_done:
                self.feed_title += content
            return

        if element == "title":
            self._title += content
        elif element == "link":
            self._link += content
        elif element in DESCRIPTION_ELEMENTS:
            self._description += content
        elif element in DATE_ELEMENTS and not self._date_done:
            self._date += content

    def endElement(self, name):
        self._flush_text()
        if name in ITEM_ELEMENTS and self._in_item:
            self._in_item = False
            self._emit_item()
        elif name in DATE_ELEMENTS and self._in_item and self._date.strip():
            # Atom entries carry both <published> and <updated>; keep the first.
            self._date_done = True
        elif name == "title" and not self._in_item and self.feed_title.strip():
            # Later titles outside items (RSS <image><title>) are not the feed's.
            self._feed_title_done = True

    def _emit_item(self) -> None:
        title = self._title.strip()
        link = self._link.strip() or (self._href or "").strip()
        if not title or not link:
            logger.debug("Dropping entry without title or link (title=%r, link=%r)", title, link)
            return

        description = sanitize_html(self._description.strip()) or None
        self.items.append(
            ParsedItem(
                title=decode_entities(title),
                link=link,
                description=description,
                image_url=self._image_url,
                published=parse_date_or_now(self._date),
            )
        )


class FeedParser:
    """Incremental feed parser.

    Feed raw bytes with :meth:`feed` as they arrive and call :meth:`close`
    to obtain the :class:`ParsedFeed`. Any tokenizer error raises
    :class:`ParsingError` and nothing collected so far is returned.
    """

    def __init__(self):
        self._handler = _FeedHandler()
        self._sax = xml.sax.make_parser()
        self._sax.setFeature(feature_external_ges, False)
        self._sax.setFeature(feature_external_pes, False)
        self._sax.setContentHandler(self._handler)
        self._started = False

    @property
    def is_empty(self) -> bool:
        """True until a chunk with non-whitespace content has been fed."""
        return not self._started

    def feed(self, chunk: bytes) -> None:
        if not chunk:
            return
        if not self._started:
            # Some servers emit blank lines before the XML declaration.
            chunk = chunk.lstrip()
            if not chunk:
                return
            self._started = True
        try:
            self._sax.feed(chunk)
        except xml.sax.SAXException as e:
            raise ParsingError(f"Unable to parse feed: {e}") from e

    def close(self) -> ParsedFeed:
        if not self._started:
            raise ParsingError("Unable to parse feed: document is empty")
        try:
            self._sax.close()
        except xml.sax.SAXException as e:
            raise ParsingError(f"Unable to parse feed: {e}") from e

        handler = self._handler
        return ParsedFeed(
            title=decode_entities(handler.feed_title.strip()),
            items=handler.items,
        )

    def parse(self, data: bytes) -> ParsedFeed:
        self.feed(data)
        return self.close()


def parse_feed(data: bytes | str) -> ParsedFeed:
    """Parse a complete feed document."""
    if isinstance(data, str):
        data = data.encode("utf-8")
    return FeedParser().parse(data)
