"""Tests for the HttpCommand value object."""

import pytest

from mcp_xray.commands.base import XRAY_CONTEXT_HEADER, HttpCommand, HttpMethod, IssueRef


class TestHttpCommand:
    """Tests for HttpCommand construction and immutability."""

    def test_defaults(self):
        command = HttpCommand(route="/rest/api/latest/issue/DEMO-1")

        assert command.method == HttpMethod.GET
        assert command.data is None
        assert dict(command.headers) == {}
        assert command.content_type == "application/json"

    def test_absolute_route_is_rejected(self):
        with pytest.raises(ValueError, match="relative"):
            HttpCommand(route="https://test.atlassian.net/rest/api/latest/issue")

    def test_command_is_frozen(self):
        command = HttpCommand(route="/issue")

        with pytest.raises(AttributeError):
            command.route = "/other"  # type: ignore[misc]

    def test_headers_cannot_change_after_construction(self):
        headers = {XRAY_CONTEXT_HEADER: "DEMO-1"}
        command = HttpCommand(route="/api/internal/test/1/steps", headers=headers)

        headers[XRAY_CONTEXT_HEADER] = "DEMO-2"
        with pytest.raises(TypeError):
            command.headers[XRAY_CONTEXT_HEADER] = "DEMO-3"  # type: ignore[index]

        assert command.headers[XRAY_CONTEXT_HEADER] == "DEMO-1"

    def test_context_key(self):
        assert HttpCommand(route="/issue").context_key == ""
        assert (
            HttpCommand(route="/x", headers={XRAY_CONTEXT_HEADER: "  DEMO-7 "}).context_key
            == "DEMO-7"
        )

    def test_repr_shows_verb_and_route(self):
        command = HttpCommand(route="/issue", method=HttpMethod.POST)

        assert repr(command) == "HttpCommand(POST /issue)"


def test_issue_ref_fields():
    ref = IssueRef("10001", "DEMO-1")

    assert ref.id == "10001"
    assert ref.key == "DEMO-1"
    assert tuple(ref) == ("10001", "DEMO-1")
