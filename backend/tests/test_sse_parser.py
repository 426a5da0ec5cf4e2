"""iter_sse_data 单元测试与属性测试"""
import sys
import os

import pytest
from hypothesis import given, strategies as st

sys.path.insert(0, os.path.join(os.path.dirname(__file__), ".."))

from providers.base import iter_sse_data  # noqa: E402


async def _lines(items):
    for item in items:
        yield item


async def _collect(lines):
    return [data async for data in iter_sse_data(_lines(lines))]


@pytest.mark.asyncio
async def test_single_events():
    out = await _collect(["data: a", "", "data: b", ""])
    assert out == ["a", "b"]


@pytest.mark.asyncio
async def test_ignores_event_id_and_comments():
    out = await _collect([
        ": keep-alive",
        "event: content_block_delta",
        "id: 7",
        "retry: 100",
        'data: {"x": 1}',
        "",
    ])
    assert out == ['{"x": 1}']


@pytest.mark.asyncio
async def test_multiline_data_joined():
    out = await _collect(["data: first", "data: second", ""])
    assert out == ["first\nsecond"]


@pytest.mark.asyncio
async def test_trailing_event_without_blank_line():
    out = await _collect(["data: a", "", "data: tail"])
    assert out == ["a", "tail"]


@pytest.mark.asyncio
async def test_data_without_space_and_crlf():
    out = await _collect(["data:x\r\n", "\r\n"])
    assert out == ["x"]


@pytest.mark.asyncio
async def test_blank_lines_only():
    assert await _collect(["", "", ""]) == []


# 不含换行、不以空格开头的 data 负载
payload = st.text(
    alphabet=st.characters(blacklist_categories=("Cs",), blacklist_characters="\r\n"),
    min_size=1,
    max_size=40,
).filter(lambda s: not s.startswith(" "))


@given(payloads=st.lists(payload, max_size=10), extra_blank=st.booleans())
def test_every_payload_recovered_in_order(payloads, extra_blank):
    """每个事件的 data 按顺序原样取回"""
    import asyncio

    lines = []
    for p in payloads:
        lines.append(f"data: {p}")
        lines.append("")
        if extra_blank:
            lines.append("")
    assert asyncio.run(_collect(lines)) == payloads
