import logging
import sys
from pathlib import Path

import pytest

sys.path.append(str(Path(__file__).resolve().parents[1]))

from utils.middleware import (  # noqa: E402
    ErrorCaptureMiddleware,
    LoggingMiddleware,
    TimeoutMiddleware,
    apply_middlewares_after,
    apply_middlewares_before,
)


@pytest.mark.asyncio
async def test_timeout_marks_payload():
    payload = await apply_middlewares_before({"provider": "openai"}, [TimeoutMiddleware(7.5)])
    assert payload["_timeout"] == 7.5


@pytest.mark.asyncio
async def test_logging_records_elapsed(caplog):
    mw = LoggingMiddleware()
    with caplog.at_level(logging.INFO, logger="utils.middleware"):
        await mw.before_request({"provider": "groq", "model": "llama", "messages": [{}, {}]})
        summary = await mw.after_response({"provider": "groq", "model": "llama", "chars": 12})
    assert summary["elapsed"] >= 0
    assert "provider=groq model=llama messages=2" in caplog.text
    assert "streamed 12 chars" in caplog.text


@pytest.mark.asyncio
async def test_logging_warns_on_error(caplog):
    mw = LoggingMiddleware()
    with caplog.at_level(logging.WARNING, logger="utils.middleware"):
        await mw.after_response({"provider": "openai", "model": "m", "error": "HTTP 500"})
    assert "failed" in caplog.text and "HTTP 500" in caplog.text


@pytest.mark.asyncio
async def test_error_capture_writes_only_failures(tmp_path):
    log_path = tmp_path / "nested" / "errors.log"
    mw = ErrorCaptureMiddleware(log_path=str(log_path))

    await apply_middlewares_after({"provider": "openai", "model": "m", "chars": 3}, [mw])
    assert not log_path.exists()

    await apply_middlewares_after({"provider": "openai", "model": "m", "error": "boom"}, [mw])
    lines = log_path.read_text(encoding="utf-8").splitlines()
    assert len(lines) == 1
    assert lines[0].endswith("| openai | m | boom")


@pytest.mark.asyncio
async def test_error_capture_survives_unwritable_path(tmp_path, caplog):
    blocker = tmp_path / "file"
    blocker.write_text("x")
    mw = ErrorCaptureMiddleware(log_path=str(blocker / "errors.log"))
    with caplog.at_level(logging.WARNING, logger="utils.middleware"):
        summary = await mw.after_response({"provider": "openai", "model": "m", "error": "boom"})
    assert summary["error"] == "boom"
    assert "无法写入错误日志" in caplog.text


@pytest.mark.asyncio
async def test_empty_chain_is_identity():
    payload = {"provider": "openai"}
    assert await apply_middlewares_before(payload, []) is payload
    assert await apply_middlewares_after(payload, None) is payload
