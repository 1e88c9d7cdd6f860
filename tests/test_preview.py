from __future__ import annotations

from pyhealthmon._preview import preview_for_log, preview_payload


def test_preview_payload_escapes_invalid_utf8() -> None:
    assert preview_payload(b"ok\xff") == "ok\\xff"


def test_preview_payload_truncates_long_payloads() -> None:
    preview = preview_payload(b"x" * 600, max_chars=10)

    assert preview.startswith("x" * 10)
    assert "<truncated 600b>" in preview


def test_preview_for_log_bounds_nested_strings() -> None:
    preview = preview_for_log({"value": "y" * 600, "items": ["a", 1, None]}, max_string=10)

    assert preview["value"].startswith("y" * 10)
    assert "<truncated>" in preview["value"]
    assert preview["items"] == ["a", 1, None]


def test_preview_for_log_handles_bytes_and_unknown_objects() -> None:
    class Opaque:
        def __repr__(self) -> str:
            return "<opaque>"

    assert preview_for_log(b"abc") == "abc"
    assert preview_for_log(Opaque()) == "<opaque>"
