"""Tests for the HTML sanitizer pipeline."""

import re

import pytest
from pasteclean.sanitizer import HTMLSanitizer, sanitize
from pasteclean.settings import SanitizerSettings


class TestDefaults:
    def setup_method(self):
        self.sanitizer = HTMLSanitizer()

    def test_div_and_bold_rewritten(self):
        assert self.sanitizer.sanitize("<div><b>x</b></div>") == "<p><strong>x</strong></p>"

    def test_italic_rewritten(self):
        assert self.sanitizer.sanitize("<p><i>x</i></p>") == "<p><em>x</em></p>"

    def test_uppercase_and_attributed_tags_rewritten(self):
        html = '<DIV><B style="font-weight:700">x</B><I class="c">y</I></DIV>'
        assert self.sanitizer.sanitize(html) == "<p><strong>x</strong><em>y</em></p>"

    def test_empty_input(self):
        assert self.sanitizer.sanitize("") == ""

    def test_plain_text_passes_through(self):
        assert self.sanitizer.sanitize("hello world") == "hello world"

    def test_ampersand_escaped(self):
        assert self.sanitizer.sanitize("a & b") == "a &amp; b"

    def test_nbsp_serialized_as_entity(self):
        assert self.sanitizer.sanitize("<p>a&nbsp;b</p>") == "<p>a&nbsp;b</p>"

    def test_unclosed_tags_closed(self):
        assert self.sanitizer.sanitize("<p><b>unclosed") == "<p><strong>unclosed</strong></p>"

    def test_void_elements_have_no_closing_slash(self):
        assert self.sanitizer.sanitize("<p>a<br>b</p><hr>") == "<p>a<br>b</p><hr>"

    def test_stages_in_order(self):
        assert [stage.slug for stage in self.sanitizer.stages] == [
            "strip-comments",
            "plain-text",
            "replacements",
            "collapse-spans",
            "clean-tags",
            "allow-only",
            "clean-attrs",
            "unwrap-tags",
            "clean-empty-tags",
            "clean-edge-brs",
        ]


class TestComments:
    def test_comment_removed(self):
        assert sanitize("<p>a<!-- note -->b</p>") == "<p>ab</p>"

    def test_multiline_comment_removed(self):
        html = "<!--[if gte mso 9]>\n<xml><o:OfficeDocumentSettings/></xml>\n<![endif]--><p>x</p>"
        assert sanitize(html) == "<p>x</p>"

    def test_comments_removed_non_greedy(self):
        assert sanitize("<!-- a -->keep<!-- b -->") == "keep"

    def test_comments_removed_even_without_cleaning(self):
        assert sanitize("a<!-- b -->c", clean_pasted_html=False) == "ac"


class TestPlainText:
    def setup_method(self):
        self.sanitizer = HTMLSanitizer(force_plain_text=True)

    def test_angle_brackets_escaped(self):
        result = self.sanitizer.sanitize("<b>hi</b>")
        assert result == "&#60;b&#62;hi&#60;/b&#62;"

    def test_no_structural_cleaning(self):
        result = self.sanitizer.sanitize('<div class="x"><script>x()</script></div>')
        assert result == "&#60;div class=\"x\"&#62;&#60;script&#62;x()&#60;/script&#62;&#60;/div&#62;"

    def test_comments_still_removed(self):
        assert self.sanitizer.sanitize("a<!-- c -->b") == "ab"

    def test_text_without_brackets_unchanged(self):
        assert self.sanitizer.sanitize("just text & more") == "just text & more"


class TestReplacements:
    def test_custom_rules_replace_defaults(self):
        sanitizer = HTMLSanitizer(clean_replacements=[(r"foo", "bar")])
        assert sanitizer.sanitize("<b>foo</b>") == "<b>bar</b>"

    def test_rules_applied_in_order(self):
        sanitizer = HTMLSanitizer(clean_replacements=[(r"a", "b"), (r"b", "c")])
        assert sanitizer.sanitize("a") == "c"

    def test_compiled_pattern_keeps_its_flags(self):
        sanitizer = HTMLSanitizer(clean_replacements=[(re.compile("x"), "y")])
        assert sanitizer.sanitize("xX") == "yX"

    def test_group_references(self):
        sanitizer = HTMLSanitizer(clean_replacements=[(r"<h[1-6]>(.*?)</h[1-6]>", r"<p>\1</p>")])
        assert sanitizer.sanitize("<h2>Title</h2>") == "<p>Title</p>"

    def test_skipped_without_cleaning(self):
        assert sanitize("<b>x</b>", clean_pasted_html=False) == "<b>x</b>"


class TestSpanCollapsing:
    def test_nbsp_span_becomes_space(self):
        assert sanitize("<p>a<span>&nbsp;</span>b</p>") == "<p>a b</p>"

    def test_whitespace_span_removed(self):
        assert sanitize("<p>a<span>  \n </span>b</p>") == "<p>ab</p>"

    def test_span_with_text_kept(self):
        assert sanitize("<p><span>word</span></p>") == "<p><span>word</span></p>"

    def test_runs_without_cleaning(self):
        result = sanitize('<p class="c"><span> </span>x</p>', clean_pasted_html=False)
        assert result == '<p class="c">x</p>'

    def test_nested_nbsp_spans(self):
        assert sanitize("a<span><span>&nbsp;</span></span>b") == "a b"


class TestDenylist:
    def test_script_removed_with_content(self):
        assert sanitize("<p>a</p><script>evil()</script>") == "<p>a</p>"

    def test_default_denylist(self):
        html = '<meta charset="utf-8"><style>.a{}</style><p>x<iframe src="y"></iframe></p>'
        assert sanitize(html) == "<p>x</p>"

    def test_selector_entries(self):
        html = '<p>keep</p><p data-x="1">drop</p>'
        assert sanitize(html, clean_tags=["p[data-x]"]) == "<p>keep</p>"

    def test_disabled_without_cleaning(self):
        result = sanitize("<script>x()</script>", clean_pasted_html=False)
        assert result == "<script>x()</script>"

    def test_empty_denylist(self):
        assert sanitize("<script>x()</script>", clean_tags=[]) == "<script>x()</script>"


class TestAllowlist:
    def test_unwraps_disallowed_elements(self):
        sanitizer = HTMLSanitizer(allow_only=["b"])
        assert sanitizer.sanitize("<div>hello <span>world</span></div>") == "hello world"

    def test_keeps_allowed_elements(self):
        sanitizer = HTMLSanitizer(allow_only=["p", "strong"])
        html = '<div>a <b>b</b> <u>c</u></div>'
        assert sanitizer.sanitize(html) == "<p>a <strong>b</strong> c</p>"

    def test_removes_empty_disallowed_elements(self):
        sanitizer = HTMLSanitizer(allow_only=["p"])
        assert sanitizer.sanitize("<p>a<u> </u><u>&nbsp;</u>b</p>") == "<p>ab</p>"

    def test_nested_disallowed_elements_unwrapped_once(self):
        sanitizer = HTMLSanitizer(allow_only=["strong"])
        html = "<div><p><b>x</b> y</p></div>"
        assert sanitizer.sanitize(html) == "<strong>x</strong> y"

    def test_independent_of_cleaning_switch(self):
        sanitizer = HTMLSanitizer(allow_only=["p"], clean_pasted_html=False)
        assert sanitizer.sanitize("<p><b>x</b></p>") == "<p>x</p>"


class TestAttributes:
    def test_default_attributes_stripped(self):
        html = '<p class="a" style="color:red" id="i" dir="ltr" draggable="true" title="t">x</p>'
        assert sanitize(html) == '<p title="t">x</p>'

    def test_custom_attributes(self):
        html = '<a href="/x" target="_blank">x</a>'
        assert sanitize(html, clean_attrs=["target"]) == '<a href="/x">x</a>'

    def test_kept_without_cleaning(self):
        html = '<p class="a">x</p>'
        assert sanitize(html, clean_pasted_html=False) == html


class TestUnwrapTags:
    def test_unwrap_by_name(self):
        html = '<p><a href="#">link</a> text</p>'
        assert sanitize(html, unwrap_tags=["a"]) == "<p>link text</p>"

    def test_unwrap_by_selector(self):
        html = '<p><a href="http://x">x</a><a href="#y">y</a></p>'
        result = sanitize(html, unwrap_tags=['a[href^="http"]'])
        assert result == '<p>x<a href="#y">y</a></p>'

    def test_unwrap_is_unconditional(self):
        assert sanitize("<p><u></u>x</p>", unwrap_tags=["u"]) == "<p>x</p>"

    def test_nested_matches(self):
        assert sanitize("<u>a<u>b</u>c</u>", unwrap_tags=["u"]) == "abc"


class TestEmptyTags:
    def setup_method(self):
        self.sanitizer = HTMLSanitizer(clean_empty_tags=True)

    def test_empty_elements_removed(self):
        html = "<p>a</p><p> </p><p><br></p><hr>"
        assert self.sanitizer.sanitize(html) == "<p>a</p><hr>"

    def test_allowed_empty_tags_kept(self):
        sanitizer = HTMLSanitizer(clean_empty_tags=True, allowed_empty_tags=["TD"])
        html = "<table><tr><td></td><td>x</td></tr></table>"
        assert sanitizer.sanitize(html) == "<table><tr><td></td><td>x</td></tr></table>"

    def test_images_removed_when_not_allowed(self):
        assert self.sanitizer.sanitize('<p>x</p><img src="a.png">') == "<p>x</p>"

    def test_disabled_by_default(self):
        assert sanitize("<p></p>") == "<p></p>"


class TestEdgeBreaks:
    def test_leading_and_trailing_breaks_removed(self):
        assert sanitize("<p><br>text<br><br></p>") == "<p>text</p>"

    def test_leading_run_removed(self):
        assert sanitize("<p><br><br>text</p>") == "<p>text</p>"

    def test_inner_break_kept(self):
        assert sanitize("<p>a<br>b</p>") == "<p>a<br>b</p>"

    def test_break_followed_by_text_kept(self):
        assert sanitize("<p>a<br> </p>") == "<p>a<br> </p>"

    def test_top_level_breaks(self):
        assert sanitize("<br>a<br>") == "a"

    def test_disabled(self):
        html = "<p><br>a<br></p>"
        assert sanitize(html, clean_edge_brs=False) == html


class TestIdempotence:
    def test_second_pass_changes_nothing(self):
        sanitizer = HTMLSanitizer()
        html = '<div class="a"><b>x</b><span>&nbsp;</span>y<br></div><!-- c -->'
        once = sanitizer.sanitize(html)
        assert once == "<p><strong>x</strong> y</p>"
        assert sanitizer.sanitize(once) == once


class TestLxmlParser:
    def setup_method(self):
        self.sanitizer = HTMLSanitizer(parser="lxml")

    def test_fragment(self):
        assert self.sanitizer.sanitize("<div><b>x</b></div>") == "<p><strong>x</strong></p>"

    def test_empty_input(self):
        assert self.sanitizer.sanitize("") == ""


class TestConstruction:
    def test_settings_object(self):
        settings = SanitizerSettings(clean_empty_tags=True)
        assert HTMLSanitizer(settings).settings is settings

    def test_options_override_settings(self):
        settings = SanitizerSettings(clean_empty_tags=True)
        sanitizer = HTMLSanitizer(settings, clean_edge_brs=False)
        assert sanitizer.settings.clean_empty_tags is True
        assert sanitizer.settings.clean_edge_brs is False

    def test_unknown_option(self):
        with pytest.raises(TypeError):
            HTMLSanitizer(no_such_option=True)
