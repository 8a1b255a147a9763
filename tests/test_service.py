"""Tests for Service and the llm version probe."""

from __future__ import annotations

import logging
import os
import signal
from pathlib import Path
from unittest.mock import patch

import pytest

from bot_typist.config.models import LLMConfig
from bot_typist.llm.child import ChildExitError, ChildPipe, SpawnError
from bot_typist.llm.service import ProbeTimeoutError, Service, check_command_path, probe_version
from bot_typist.streams.base import Cancelled, read_all
from fakes import RecordingCellWriter

# ------------------------------------------------------------------ #
# Helpers
# ------------------------------------------------------------------ #


def _make_script(tmp_path: Path, body: str, name: str = "llm") -> str:
    script = tmp_path / name
    script.write_text(f"#!/bin/sh\n{body}\n")
    script.chmod(0o755)
    return str(script)


def _make_service(path: str, **kwargs: object) -> Service:
    kwargs.setdefault("stop", "")
    return Service(LLMConfig(path=path, **kwargs))


class _RejectingClose(RecordingCellWriter):
    async def close(self) -> bool:
        await super().close()
        return False


# ------------------------------------------------------------------ #
# Command line
# ------------------------------------------------------------------ #


class TestCommandArgs:
    """Arguments passed to the llm command."""

    def test_defaults(self) -> None:
        service = Service(LLMConfig())
        assert service.command_args() == ["-o", "stop", "\n%output\n"]

    def test_all_options(self) -> None:
        service = _make_service(
            "llm",
            system_prompt="You're a bot",
            model="gpt5",
            extra_arguments=["--asdf"],
        )
        assert service.command_args() == [
            "--system",
            "You're a bot",
            "--model",
            "gpt5",
            "--asdf",
        ]

    async def test_arguments_reach_the_command(self) -> None:
        service = _make_service(
            "echo",
            system_prompt="You're a bot",
            model="gpt5",
            extra_arguments=["--asdf"],
        )
        output = await service.run("", read_all)
        assert output == "--system You're a bot --model gpt5 --asdf\n"

    async def test_stop_sequence(self) -> None:
        service = _make_service("echo", stop="\n%output\n")
        assert await service.run("", read_all) == "-o stop \n%output\n\n"

    async def test_command_is_logged(self, caplog: pytest.LogCaptureFixture) -> None:
        service = _make_service("echo", system_prompt="You're a bot", model="gpt5")
        with caplog.at_level(logging.INFO, logger="bot_typist.llm.service"):
            await service.run("", read_all)
        assert "systemPrompt=```\nYou're a bot\n```" in caplog.text
        assert "echo --system '$systemPrompt' --model gpt5" in caplog.text

    async def test_config_can_change_between_runs(self) -> None:
        service = _make_service("echo", model="a")
        assert await service.run("", read_all) == "--model a\n"
        service.config = LLMConfig(path="echo", model="b", stop="")
        assert await service.run("", read_all) == "--model b\n"


# ------------------------------------------------------------------ #
# Running
# ------------------------------------------------------------------ #


class TestRun:
    """Sending a prompt and handling the reply."""

    async def test_prompt_is_sent_on_stdin(self) -> None:
        service = _make_service("cat")
        assert await service.run("Hello!", read_all) == "Hello!"

    async def test_empty_path(self) -> None:
        service = _make_service("")
        with pytest.raises(ValueError, match="No llm command configured"):
            await service.run("hi", read_all)

    async def test_missing_command(self, caplog: pytest.LogCaptureFixture) -> None:
        service = _make_service("/nonexistent/llm")
        with pytest.raises(SpawnError):
            await service.run("hi", read_all)
        assert "command not found" in caplog.text

    async def test_command_fails(self, tmp_path: Path, caplog: pytest.LogCaptureFixture) -> None:
        path = _make_script(tmp_path, "cat >/dev/null; echo 'no such model' >&2; exit 2")
        service = _make_service(path)
        with pytest.raises(ChildExitError) as exc_info:
            await service.run("hi", read_all)
        assert exc_info.value.exit_code == 2
        assert "no such model" in caplog.text
        assert any(r.levelno == logging.ERROR for r in caplog.records)


class TestReply:
    """Streaming a reply into a CellWriter."""

    async def test_reply_is_split_into_cells(self) -> None:
        service = _make_service("cat")
        writer = RecordingCellWriter()
        await service.reply("%python\nx = 1\n%markdown\nbot: done\n", writer)
        assert writer.cells == [
            {"type": "code", "text": "x = 1\n"},
            {"type": "markdown", "text": "bot: done\n"},
        ]
        assert writer.closed is True

    async def test_reply_uses_cue(self) -> None:
        service = _make_service("cat")
        writer = RecordingCellWriter()
        await service.reply("hello", writer, cue="Bot")
        assert writer.cells == [{"type": "markdown", "text": "Bot: hello"}]

    async def test_cancelled_by_writer(self, caplog: pytest.LogCaptureFixture) -> None:
        service = _make_service("cat")
        writer = RecordingCellWriter(accept=False)
        with caplog.at_level(logging.INFO, logger="bot_typist.llm.service"):
            with pytest.raises(Cancelled):
                await service.reply("hello\nmore\n", writer)
        assert writer.calls == ["write"]
        assert "(cancelled by user)" in caplog.text
        assert not any(r.levelno >= logging.ERROR for r in caplog.records)

    async def test_close_rejected(self) -> None:
        service = _make_service("cat")
        with pytest.raises(Cancelled):
            await service.reply("hello", _RejectingClose())


# ------------------------------------------------------------------ #
# Version probe
# ------------------------------------------------------------------ #


class TestProbe:
    """Checking that the llm command runs at all."""

    async def test_probe_version(self, tmp_path: Path) -> None:
        path = _make_script(tmp_path, 'echo "llm, version 0.12"')
        assert await probe_version(path) == "llm, version 0.12\n"

    async def test_probe_timeout(self, tmp_path: Path) -> None:
        path = _make_script(tmp_path, "exec sleep 10")
        with pytest.raises(ProbeTimeoutError, match="didn't respond"):
            await probe_version(path, timeout=0.2)

    async def test_version_timeout_kills_and_reaps_process(self, tmp_path: Path) -> None:
        path = _make_script(tmp_path, "exec sleep 10")
        spawn = ChildPipe.spawn
        pipes: list[ChildPipe] = []

        async def recording_spawn(*args: object, **kwargs: object) -> ChildPipe:
            pipe = await spawn(*args, **kwargs)
            pipes.append(pipe)
            return pipe

        with patch.object(ChildPipe, "spawn", recording_spawn), pytest.raises(ProbeTimeoutError):
            await probe_version(path, timeout=0.2)

        (pipe,) = pipes
        assert await pipe.wait() == -signal.SIGKILL
        with pytest.raises(ProcessLookupError):
            os.kill(pipe.pid, 0)

    async def test_probe_failure(self, tmp_path: Path) -> None:
        path = _make_script(tmp_path, "echo 'bad flag' >&2; exit 2")
        with pytest.raises(ChildExitError):
            await probe_version(path)

    async def test_check_ok(self, tmp_path: Path) -> None:
        path = _make_script(tmp_path, 'echo "llm, version 0.12"')
        assert await check_command_path(path) == path

    async def test_check_unexpected_output(
        self, tmp_path: Path, caplog: pytest.LogCaptureFixture
    ) -> None:
        path = _make_script(tmp_path, 'echo "something else"')
        with caplog.at_level(logging.INFO, logger="bot_typist.llm.service"):
            assert await check_command_path(path) == path
        assert "something else" in caplog.text

    async def test_check_empty_path(self) -> None:
        assert await check_command_path("") == ""

    async def test_check_missing(self, caplog: pytest.LogCaptureFixture) -> None:
        with caplog.at_level(logging.INFO, logger="bot_typist.llm.service"):
            assert await check_command_path("/nonexistent/llm") == ""
        assert "not usable" in caplog.text

    async def test_check_timeout(self, tmp_path: Path, caplog: pytest.LogCaptureFixture) -> None:
        path = _make_script(tmp_path, "exec sleep 10")
        with caplog.at_level(logging.INFO, logger="bot_typist.llm.service"):
            assert await check_command_path(path, timeout=0.2) == ""
        assert "timed out" in caplog.text

    async def test_check_failure(self, tmp_path: Path, caplog: pytest.LogCaptureFixture) -> None:
        path = _make_script(tmp_path, "exit 1")
        with caplog.at_level(logging.INFO, logger="bot_typist.llm.service"):
            assert await check_command_path(path) == ""
        assert "llm error" in caplog.text

    async def test_service_check_uses_config(self, tmp_path: Path) -> None:
        path = _make_script(tmp_path, 'echo "llm, version 0.12"')
        assert await _make_service(path).check_command_path() == path
