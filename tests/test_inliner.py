"""Tests for external entity inlining."""

from pathlib import Path

import pytest

from dd_core.errors import StreamError
from dd_core.inliner import entity_map, inline_entities, inline_file

FIXTURES = Path(__file__).resolve().parent / "fixtures"


class TestInlineEntities:
    def test_substitutes_declared_entities(self, tmp_path):
        (tmp_path / "part.xml").write_text(
            '<?xml version="1.0" encoding="UTF-8"?>\n<vendor vendor-id="X" code="1" name="X"/>\n',
            encoding="utf-8",
        )
        root = (
            '<!DOCTYPE dictionary [\n  <!ENTITY Part SYSTEM "part.xml">\n]>\n'
            "<dictionary>&Part;</dictionary>"
        )
        inlined = inline_entities(root, tmp_path)
        assert '<vendor vendor-id="X" code="1" name="X"/>' in inlined
        assert "&Part;" not in inlined

    def test_strips_prolog_of_inlined_file(self, tmp_path):
        (tmp_path / "part.xml").write_text('<?xml version="1.0"?><avp code="1"/>', encoding="utf-8")
        root = '<!DOCTYPE d [<!ENTITY P SYSTEM "part.xml">]><d>&P;</d>'
        inlined = inline_entities(root, tmp_path)
        assert inlined.count("<?xml") == 0
        assert '<d><avp code="1"/></d>' in inlined

    def test_undeclared_references_left_verbatim(self, tmp_path):
        (tmp_path / "part.xml").write_text("<a/>", encoding="utf-8")
        root = '<!DOCTYPE d [<!ENTITY P SYSTEM "part.xml">]><d name="x &amp; y">&P;&Missing;</d>'
        inlined = inline_entities(root, tmp_path)
        assert "&amp;" in inlined
        assert "&Missing;" in inlined
        assert "<a/>" in inlined

    def test_every_occurrence_replaced(self, tmp_path):
        (tmp_path / "part.xml").write_text("<a/>", encoding="utf-8")
        root = '<!DOCTYPE d [<!ENTITY P SYSTEM "part.xml">]><d>&P;&P;</d>'
        assert "<d><a/><a/></d>" in inline_entities(root, tmp_path)

    def test_no_declarations_returns_text_unchanged(self, tmp_path):
        text = "<d>&lt;</d>"
        assert inline_entities(text, tmp_path) == text

    def test_missing_entity_file_is_stream_error(self, tmp_path):
        root = '<!DOCTYPE d [<!ENTITY P SYSTEM "absent.xml">]><d>&P;</d>'
        with pytest.raises(StreamError) as exc_info:
            entity_map(root, tmp_path)
        assert exc_info.value.issue.code == "UNREADABLE_FILE"


class TestInlineFile:
    def test_resolves_relative_to_root_directory(self):
        inlined = inline_file(FIXTURES / "root" / "dictionary.xml")
        assert 'vendor-id="TGPP"' in inlined
        assert 'name="Diameter Credit Control Application"' in inlined
        assert "&Vendors;" not in inlined
        assert "&Credit;" not in inlined

    def test_missing_root_file(self, tmp_path):
        with pytest.raises(StreamError):
            inline_file(tmp_path / "nope.xml")
