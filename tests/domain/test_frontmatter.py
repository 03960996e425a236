"""Tests for the frontmatter codec."""

from typing import Any

import pytest

from micropress.domain.errors import MalformedDocumentError
from micropress.domain.frontmatter import decode, encode, normalize_photos, split_document


class TestEncode:
    def test_reference_layout(self) -> None:
        src: dict[str, Any] = {
            "date": ["2022-12-12"],
            "category": ["test1", "test2"],
            "photo": [{"value": "", "alt": ""}],
            "draft": True,
        }
        expected = (
            "---\n"
            "date: 2022-12-12\n"
            'category: ["test1","test2"]\n'
            'photo: [{"value":"","alt":""}]\n'
            "draft: true\n"
            "---"
        )
        assert encode(src) == expected

    def test_skips_content(self) -> None:
        assert encode({"content": ["body"], "h": ["entry"]}) == "---\nh: entry\n---"

    def test_false_literal(self) -> None:
        assert "draft: false" in encode({"draft": False})

    def test_photo_strings_become_records(self) -> None:
        result = encode({"photo": ["/img/a.jpg"]})
        assert 'photo: [{"value":"/img/a.jpg","alt":""}]' in result

    def test_single_object_is_json_array(self) -> None:
        result = encode({"location": [{"lat": "1"}]})
        assert 'location: [{"lat":"1"}]' in result

    def test_ambiguous_scalar_is_quoted(self) -> None:
        result = encode({"rating": ["5"], "flag": ["true"]})
        assert 'rating: "5"' in result
        assert 'flag: "true"' in result

    def test_multiline_scalar_is_quoted(self) -> None:
        result = encode({"summary": ["line one\nline two"]})
        assert 'summary: "line one\\nline two"' in result

    def test_empty_list(self) -> None:
        assert "tags: []" in encode({"tags": []})

    def test_non_ascii_kept(self) -> None:
        assert 'category: ["café","日本"]' in encode({"category": ["café", "日本"]})

    def test_single_number_and_null_are_bare(self) -> None:
        result = encode({"rating": [5], "ratio": [1.5], "x": [None]})
        assert result.splitlines()[1:4] == ["rating: 5", "ratio: 1.5", "x: null"]


class TestDecode:
    def test_basic(self) -> None:
        text = '---\ndate: 2022-04-08\ncategory: ["a","b"]\ndraft: true\n---\n\nBody'
        assert decode(text) == {
            "date": ["2022-04-08"],
            "category": ["a", "b"],
            "draft": True,
        }

    def test_value_with_separator(self) -> None:
        """Only the first ': ' splits key from value."""
        assert decode("---\nname: a: b\n---") == {"name": ["a: b"]}

    def test_bare_key(self) -> None:
        assert decode("---\nsummary:\n---") == {"summary": [""]}

    def test_crlf(self) -> None:
        assert decode("---\r\ndate: 2022-04-08\r\n---\r\nBody") == {"date": ["2022-04-08"]}

    def test_json_object_wrapped(self) -> None:
        assert decode('---\nphoto: {"value":"x","alt":"y"}\n---') == {
            "photo": [{"value": "x", "alt": "y"}]
        }

    @pytest.mark.parametrize("text", ["", "no block", "---\ndate: x\n", "--- inline ---"])
    def test_missing_block(self, text: str) -> None:
        with pytest.raises(MalformedDocumentError):
            decode(text)

    def test_line_without_separator(self) -> None:
        with pytest.raises(MalformedDocumentError):
            decode("---\njust words\n---")


class TestRoundTrip:
    @pytest.mark.parametrize(
        "properties",
        [
            {
                "photo": [{"value": "https://micropub.rocks/media/sunset.jpg", "alt": "Sunset"}],
                "date": ["2022-04-08"],
                "postId": ["2022-04-08-2b0a7b"],
            },
            {"category": ["one"], "draft": False},
            {"category": ["a", "b", "c"], "h": ["entry"]},
            {"rating": ["5"], "empty": [""], "literal": ["null"]},
            {"summary": ["multi\nline"], "spaced": ["  padded  "]},
            {"photo": [{"value": "/img/1.jpg", "alt": ""}, {"value": "/img/2.jpg", "alt": "b"}]},
            {},
        ],
    )
    def test_decode_encode(self, properties: dict[str, Any]) -> None:
        assert decode(encode(properties)) == properties

    def test_key_order_preserved(self) -> None:
        properties = {"z": ["1a"], "a": ["2a"], "m": ["3a"]}
        assert list(decode(encode(properties))) == ["z", "a", "m"]


class TestSplitDocument:
    def test_rest_is_exact(self) -> None:
        text = "---\ndate: 2022-04-08\n---\n\nBody\n---\nwith a rule\n"
        properties, rest = split_document(text)
        assert properties == {"date": ["2022-04-08"]}
        assert rest == "\n\nBody\n---\nwith a rule\n"


class TestNormalizePhotos:
    def test_mixed(self) -> None:
        assert normalize_photos(["/a.jpg", {"value": "/b.jpg", "alt": "B"}, {"value": "/c"}]) == [
            {"value": "/a.jpg", "alt": ""},
            {"value": "/b.jpg", "alt": "B"},
            {"value": "/c", "alt": ""},
        ]


class TestLegacyBlock:
    def test_reencode_is_unchanged(self) -> None:
        block = "\n".join(
            [
                "---",
                "date: 2022-04-08",
                "rating: 5",
                "x: null",
                'category: ["a","b"]',
                "draft: false",
                "---",
            ]
        )
        assert encode(decode(block)) == block
