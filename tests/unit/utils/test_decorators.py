from unittest.mock import MagicMock

import pytest

from mcp_xray.utils.decorators import check_write_access


class DummyContext:
    def __init__(self, lifespan_context):
        self.request_context = MagicMock()
        self.request_context.lifespan_context = lifespan_context


def writable(read_only):
    return DummyContext({"app_lifespan_context": MagicMock(read_only=read_only)})


@pytest.mark.anyio
async def test_check_write_access_blocks_in_read_only():
    @check_write_access
    async def xray_new_test(ctx, summary):
        return summary

    with pytest.raises(ValueError, match="Cannot new test in read-only mode"):
        await xray_new_test(writable(True), "s")


@pytest.mark.anyio
async def test_check_write_access_allows_in_writable():
    @check_write_access
    async def xray_new_test(ctx, summary):
        return summary * 2

    assert await xray_new_test(writable(False), "s") == "ss"


@pytest.mark.anyio
async def test_check_write_access_without_lifespan_context():
    @check_write_access
    async def xray_new_test(ctx):
        return "called"

    assert await xray_new_test(DummyContext(None)) == "called"
