"""Tests for the stdio process supervisor."""

import asyncio
import os
import sys

import pytest

from gemini_ui.models.mcp import MCPServerConfig, ProcessState
from gemini_ui.services.exceptions import (
    AlreadyRunningError,
    MissingCommandError,
    UnsupportedTransportError,
)
from gemini_ui.services.process_supervisor import ProcessSupervisor, build_environment


async def wait_until_stopped(supervisor, name, timeout=10.0):
    """Wait for the exit watcher of ``name`` to finish, then report its status."""
    record = supervisor._processes[name]
    await asyncio.wait_for(record.watcher, timeout=timeout)
    return supervisor.status(name)


def python_server(code, **kwargs):
    return MCPServerConfig(transport="stdio", command=sys.executable, args=["-c", code], **kwargs)


class TestProcessSupervisor:
    """Test ProcessSupervisor lifecycle."""

    @pytest.fixture
    def supervisor(self):
        return ProcessSupervisor()

    @pytest.fixture
    def definition(self, sleeper):
        return MCPServerConfig(transport="stdio", **sleeper)

    def test_status_unknown_is_stopped(self, supervisor):
        status = supervisor.status("nothing")

        assert status.state == ProcessState.STOPPED
        assert status.pid is None
        assert status.error is None

    def test_start_and_status(self, supervisor, definition, run):
        async def scenario():
            try:
                started = await supervisor.start("fs", definition)
                current = supervisor.status("fs")
                return started, current
            finally:
                await supervisor.shutdown()

        started, current = run(scenario())

        assert started.state == ProcessState.RUNNING
        assert isinstance(started.pid, int)
        assert current.state == ProcessState.RUNNING
        assert current.pid == started.pid
        assert current.uptime >= 0

    def test_double_start_rejected(self, supervisor, definition, run):
        """Test that starting a running name again raises."""
        async def scenario():
            try:
                await supervisor.start("fs", definition)
                with pytest.raises(AlreadyRunningError):
                    await supervisor.start("fs", definition)
                assert supervisor.running_names() == ["fs"]
            finally:
                await supervisor.shutdown()

        run(scenario())

    @pytest.mark.parametrize("definition", [
        MCPServerConfig(transport="http", url="https://mcp.example.com"),
        MCPServerConfig(transport="sse", url="https://mcp.example.com/sse"),
        MCPServerConfig(),
    ])
    def test_non_stdio_rejected(self, supervisor, definition, run):
        with pytest.raises(UnsupportedTransportError):
            run(supervisor.start("remote", definition))
        assert supervisor.status("remote").state == ProcessState.STOPPED

    def test_missing_command_rejected(self, supervisor, run):
        with pytest.raises(MissingCommandError):
            run(supervisor.start("fs", MCPServerConfig(transport="stdio")))

    def test_stop_unknown_is_noop(self, supervisor):
        supervisor.stop("nothing")
        assert supervisor.status("nothing").state == ProcessState.STOPPED

    def test_stop_forgets_immediately(self, supervisor, definition, run):
        """Test that stop reports stopped at once and the child goes away."""
        async def scenario():
            await supervisor.start("fs", definition)
            record = supervisor._processes["fs"]

            supervisor.stop("fs")
            status_after_stop = supervisor.status("fs")

            returncode = await asyncio.wait_for(record.process.wait(), timeout=10)
            await asyncio.wait_for(record.watcher, timeout=10)
            return status_after_stop, returncode

        status_after_stop, returncode = run(scenario())

        assert status_after_stop.state == ProcessState.STOPPED
        assert status_after_stop.error is None
        assert returncode != 0

    def test_exit_is_observed(self, supervisor, run):
        async def scenario():
            await supervisor.start("quick", python_server("pass"))
            return await wait_until_stopped(supervisor, "quick")

        status = run(scenario())

        assert status.state == ProcessState.STOPPED
        assert status.error is None
        assert "quick" not in supervisor._processes

    def test_crash_is_recorded(self, supervisor, run):
        """Test that a non-zero exit shows up as the last error."""
        async def scenario():
            await supervisor.start("crashy", python_server("raise SystemExit(3)"))
            return await wait_until_stopped(supervisor, "crashy")

        status = run(scenario())

        assert status.state == ProcessState.STOPPED
        assert status.error == "Exited with code 3"

    def test_spawn_failure_is_not_raised(self, supervisor, tmp_path, run):
        definition = MCPServerConfig(transport="stdio", command=str(tmp_path / "no-such-binary"))

        status = run(supervisor.start("missing", definition))

        assert status.state == ProcessState.STOPPED
        assert status.error.startswith("Failed to spawn")
        assert supervisor.status("missing").error == status.error
        assert supervisor.running_names() == []

    def test_error_cleared_on_next_start(self, supervisor, tmp_path, definition, run):
        async def scenario():
            broken = MCPServerConfig(transport="stdio", command=str(tmp_path / "nope"))
            await supervisor.start("fs", broken)
            try:
                return await supervisor.start("fs", definition)
            finally:
                await supervisor.shutdown()

        status = run(scenario())

        assert status.state == ProcessState.RUNNING
        assert status.error is None

    def test_restart_not_clobbered_by_old_watcher(self, supervisor, definition, run):
        """Test that the first instance exiting leaves the second registered."""
        async def scenario():
            try:
                first = await supervisor.start("fs", definition)
                old_record = supervisor._processes["fs"]
                supervisor.stop("fs")
                second = await supervisor.start("fs", definition)

                await asyncio.wait_for(old_record.watcher, timeout=10)
                return first, second, supervisor.status("fs")
            finally:
                await supervisor.shutdown()

        first, second, current = run(scenario())

        assert first.pid != second.pid
        assert current.state == ProcessState.RUNNING
        assert current.pid == second.pid

    def test_stop_during_start(self, supervisor, definition, run):
        """Test that a stop issued while spawning wins."""
        async def scenario():
            task = asyncio.create_task(supervisor.start("fs", definition))
            await asyncio.sleep(0)
            assert supervisor.status("fs").state == ProcessState.STARTING
            with pytest.raises(AlreadyRunningError):
                await supervisor.start("fs", definition)

            supervisor.stop("fs")
            status = await task
            record_watchers = [t for t in asyncio.all_tasks() if t is not asyncio.current_task()]
            await asyncio.wait_for(asyncio.gather(*record_watchers), timeout=10)
            return status

        status = run(scenario())

        assert status.state == ProcessState.STOPPED
        assert supervisor.running_names() == []

    def test_environment_merged(self, supervisor, tmp_path, monkeypatch, run):
        """Test that definition env is laid over the inherited environment."""
        monkeypatch.setenv("INHERITED_VAR", "from-parent")
        monkeypatch.setenv("OVERRIDDEN_VAR", "parent")
        out_file = tmp_path / "env.txt"
        code = (
            "import os, sys; open(sys.argv[1], 'w').write("
            "os.environ['INHERITED_VAR'] + ',' + os.environ['OVERRIDDEN_VAR'] + ',' "
            "+ os.environ['SERVER_ONLY_VAR'])"
        )
        definition = MCPServerConfig(
            transport="stdio",
            command=sys.executable,
            args=["-c", code, str(out_file)],
            env={"OVERRIDDEN_VAR": "server", "SERVER_ONLY_VAR": "yes"},
        )

        async def scenario():
            await supervisor.start("envy", definition)
            return await wait_until_stopped(supervisor, "envy")

        status = run(scenario())

        assert status.error is None
        assert out_file.read_text() == "from-parent,server,yes"

    def test_build_environment(self, monkeypatch):
        monkeypatch.setenv("KEEP_ME", "1")

        env = build_environment({"EXTRA": "2"})

        assert env["KEEP_ME"] == "1"
        assert env["EXTRA"] == "2"
        assert set(os.environ) <= set(env)
        assert build_environment(None) == dict(os.environ)

    def test_shutdown_stops_everything(self, supervisor, definition, run):
        async def scenario():
            await supervisor.start("a", definition)
            await supervisor.start("b", definition)
            records = list(supervisor._processes.values())
            await supervisor.shutdown(timeout=10)
            return records

        records = run(scenario())

        assert supervisor.running_names() == []
        assert all(record.process.returncode is not None for record in records)

    def test_shutdown_waits_for_stopped_processes(self, supervisor, definition, run):
        """Test that a process stopped before shutdown is still reaped."""
        async def scenario():
            await supervisor.start("fs", definition)
            record = supervisor._processes["fs"]
            supervisor.stop("fs")
            await supervisor.shutdown(timeout=10)
            return record

        record = run(scenario())

        assert record.process.returncode is not None
        assert record.watcher.done()
        assert supervisor._watchers == {}

    def test_noisy_stderr_does_not_stall(self, supervisor, run):
        """Test that a server logging far more than a pipe buffer still runs to completion."""
        code = "import sys\nfor i in range(4096):\n    sys.stderr.write('x' * 63 + '\\n')"

        async def scenario():
            await supervisor.start("chatty", python_server(code))
            return await wait_until_stopped(supervisor, "chatty", timeout=20)

        status = run(scenario())

        assert status.state == ProcessState.STOPPED
        assert status.error is None
