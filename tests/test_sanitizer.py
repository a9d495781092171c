"""Tests for sanitizer.py: HTML to plain text."""

from feedsync.sanitizer import sanitize_html


def test_strips_tags():
    assert sanitize_html("<p>Hello <b>world</b></p>") == "Hello world"


def test_removes_script_and_style_blocks_with_bodies():
    html = "<style>p { color: red; }</style>Text<SCRIPT type='x'>alert('hi')</SCRIPT> more"
    assert sanitize_html(html) == "Text more"


def test_script_removal_spans_lines():
    html = "before<script>\nvar a = 1;\n</script>after"
    assert sanitize_html(html) == "beforeafter"


def test_decodes_entities_then_strips_revealed_tags():
    assert sanitize_html("&lt;b&gt;hi&lt;/b&gt;&amp;nbsp;there") == "hi there"


def test_collapses_whitespace_and_trims():
    assert sanitize_html("  <p>a</p>\n\n   <p>b</p>\t c  ") == "a b c"


def test_unclosed_tag_does_not_raise():
    assert sanitize_html("5 < 6 and <b>bold") == "5 < 6 and bold"
    assert sanitize_html("<div class='x'") == "<div class='x'"


def test_empty_input():
    assert sanitize_html("") == ""
    assert sanitize_html("<br/><img src='x.png'>") == ""
