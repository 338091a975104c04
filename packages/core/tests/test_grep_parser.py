"""Tests for `git grep -n` parsing."""

from githistory_core.parsers.grep import GrepInput, classify, parse_grep


def test_match_lines():
    matches = parse_grep("src/a.py:12:    return value\nREADME.md:1:# Title\n")
    assert [(m.file, m.line, m.content) for m in matches] == [
        ("src/a.py", 12, "    return value"),
        ("README.md", 1, "# Title"),
    ]


def test_content_keeps_colons():
    matches = parse_grep("conf.yml:3:url: http://example.com:8080\n")
    assert matches[0].content == "url: http://example.com:8080"


def test_separator_and_malformed_rejected():
    text = "a.py:1:x\n--\nno separators here\nb.py:two:y\nc.py:5:z\n"
    assert [m.file for m in parse_grep(text)] == ["a.py", "c.py"]


def test_classify_separator():
    assert classify("--") == (GrepInput.SEPARATOR, None)


def test_empty_content_allowed():
    matches = parse_grep("blank.txt:4:\n")
    assert matches[0].line == 4
    assert matches[0].content == ""


def test_no_output():
    assert parse_grep("") == []
