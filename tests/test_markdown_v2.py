"""Tests for chatrelay.markdown_v2, untrusted Markdown to Telegram MarkdownV2."""

from chatrelay.markdown_v2 import FENCE, close_unterminated_fences, markdown_to_v2


class TestEscaping:
    def test_empty(self):
        assert markdown_to_v2("") == ""

    def test_plain_text_unchanged(self):
        assert markdown_to_v2("Hello world") == "Hello world"

    def test_reserved_characters(self):
        assert markdown_to_v2("1 + 1 = 2!") == "1 \\+ 1 \\= 2\\!"
        assert markdown_to_v2("Done.") == "Done\\."
        assert markdown_to_v2("a (b) [c] {d}") == "a \\(b\\) \\[c\\] \\{d\\}"

    def test_backslash(self):
        assert markdown_to_v2("C:\\temp") == "C:\\\\temp"

    def test_unmatched_markers_escaped(self):
        assert markdown_to_v2("**oops") == "\\*\\*oops"
        assert markdown_to_v2("2 * 3 * 4") == "2 \\* 3 \\* 4"

    def test_snake_case_stays_literal(self):
        assert markdown_to_v2("use snake_case_name") == "use snake\\_case\\_name"

    def test_list_markers(self):
        assert markdown_to_v2("- one\n* two") == "\\- one\n\\* two"

    def test_null_bytes_dropped(self):
        assert markdown_to_v2("a\x00PH0\x00b") == "aPH0b"


class TestEmphasis:
    def test_double_asterisk_bold(self):
        assert markdown_to_v2("**hello**") == "*hello*"

    def test_double_underscore_bold(self):
        assert markdown_to_v2("__hello__") == "*hello*"

    def test_single_asterisk_italic(self):
        assert markdown_to_v2("*hello*") == "_hello_"

    def test_underscore_italic(self):
        assert markdown_to_v2("_hello_") == "_hello_"

    def test_strikethrough(self):
        assert markdown_to_v2("~~gone~~") == "~gone~"

    def test_bold_content_escaped(self):
        assert markdown_to_v2("**Note: v1.2!**") == "*Note: v1\\.2\\!*"

    def test_nested_emphasis_escaped(self):
        assert markdown_to_v2("**a *b* c**") == "*a \\*b\\* c*"

    def test_bold_and_italic_together(self):
        result = markdown_to_v2("**bold** and *italic*")
        assert result == "*bold* and _italic_"


class TestCode:
    def test_inline_code_kept(self):
        assert markdown_to_v2("Run `pip install -e .` now") == (
            "Run `pip install -e .` now"
        )

    def test_inline_code_inside_bold(self):
        assert markdown_to_v2("**run `ls -la`**") == "*run `ls -la`*"

    def test_fenced_block_with_language(self):
        md = "```python\nprint('hi')\n```"
        assert markdown_to_v2(md) == "```python\nprint('hi')\n```"

    def test_fenced_block_escapes_backslash_and_backtick(self):
        md = "```\na\\b`c\n```"
        assert markdown_to_v2(md) == "```\na\\\\b\\`c\n```"

    def test_fenced_block_content_not_formatted(self):
        md = "```\n**not bold** 1.5\n```"
        assert markdown_to_v2(md) == "```\n**not bold** 1.5\n```"

    def test_text_around_block(self):
        md = "Try this:\n```sh\nls\n```\nDone."
        assert markdown_to_v2(md) == "Try this:\n```sh\nls\n```\nDone\\."

    def test_unterminated_block_closed(self):
        md = "Look:\n```js\nlet a = 1;"
        result = markdown_to_v2(md)
        assert result == "Look:\n```js\nlet a = 1;\n```"
        assert result.count(FENCE) % 2 == 0

    def test_three_fences_become_even(self):
        md = "```\na\n```\ntext\n```\nb"
        assert markdown_to_v2(md).count(FENCE) == 4


class TestOtherConstructs:
    def test_heading_bold(self):
        assert markdown_to_v2("# Title (draft)") == "*Title \\(draft\\)*"

    def test_heading_with_bold_wrapper(self):
        assert markdown_to_v2("## **Title**") == "*Title*"
        assert markdown_to_v2("### __Setup v2__") == "*Setup v2*"

    def test_heading_with_inner_bold_left_literal(self):
        assert markdown_to_v2("# **a** and **b**") == "*\\*\\*a\\*\\* and \\*\\*b\\*\\**"

    def test_link(self):
        assert markdown_to_v2("[site](https://example.com)") == (
            "[site](https://example.com)"
        )

    def test_link_text_escaped(self):
        assert markdown_to_v2("[v1.0](https://x.io)") == "[v1\\.0](https://x.io)"


class TestCloseUnterminatedFences:
    def test_even_untouched(self):
        assert close_unterminated_fences("```\nx\n```") == "```\nx\n```"

    def test_odd_closed(self):
        assert close_unterminated_fences("```\nx") == "```\nx\n```"

    def test_odd_ending_in_newline(self):
        assert close_unterminated_fences("```\nx\n") == "```\nx\n```"
