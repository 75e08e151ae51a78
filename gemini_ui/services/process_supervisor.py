"""Supervisor for locally spawned stdio MCP server processes."""

import asyncio
import logging
import os
import time
from dataclasses import dataclass
from typing import Dict, List, Mapping, Optional

from ..models.mcp import MCPServerConfig, MCPTransport, ProcessState, ProcessStatus
from .exceptions import (
    AlreadyRunningError,
    MissingCommandError,
    UnsupportedTransportError,
)

logger = logging.getLogger(__name__)

STDERR_CHUNK_SIZE = 4096
STDERR_FLUSH_TIMEOUT = 1.0


def build_environment(overrides: Optional[Mapping[str, str]] = None) -> Dict[str, str]:
    """Inherited environment with ``overrides`` laid on top."""
    env = dict(os.environ)
    env.update(overrides or {})
    return env


@dataclass
class RunningProcess:
    """Registry entry for one named server process."""

    name: str
    definition: MCPServerConfig
    state: ProcessState = ProcessState.STARTING
    process: Optional[asyncio.subprocess.Process] = None
    started_at: Optional[float] = None
    watcher: Optional[asyncio.Task] = None
    stopping: bool = False

    @property
    def is_live(self) -> bool:
        if self.state == ProcessState.STARTING:
            return True
        return (
            self.state == ProcessState.RUNNING
            and self.process is not None
            and self.process.returncode is None
        )


class ProcessSupervisor:
    """Owns the name -> process registry; at most one live process per name.

    The registry is only touched from tasks of the event loop that runs the
    supervisor, so start/stop/status and the exit watchers interleave only at
    ``await`` points and need no lock. ``start`` spawns and returns without a
    readiness check; ``stop`` signals and forgets. Failures after a start are
    recorded and surface through :meth:`status`.
    """

    def __init__(self):
        self._processes: Dict[str, RunningProcess] = {}
        self._errors: Dict[str, str] = {}
        # Every child whose exit has not been observed yet, stopped ones included
        self._watchers: Dict[asyncio.Task, RunningProcess] = {}

    async def start(self, name: str, definition: MCPServerConfig) -> ProcessStatus:
        """Spawn ``definition`` under ``name``.

        Raises:
            UnsupportedTransportError: If the server is not stdio
            MissingCommandError: If no command is set
            AlreadyRunningError: If a live process is registered under ``name``
        """
        transport = definition.effective_transport
        if transport != MCPTransport.STDIO:
            label = transport.value if transport else "unknown"
            raise UnsupportedTransportError(
                f"Only stdio transport servers can be started ('{name}' is {label})"
            )
        if not definition.command:
            raise MissingCommandError("Command is required for stdio transport")

        current = self._processes.get(name)
        if current is not None and current.is_live:
            raise AlreadyRunningError(f"Server '{name}' is already running")

        record = RunningProcess(name=name, definition=definition)
        self._processes[name] = record
        self._errors.pop(name, None)

        command = [definition.command] + list(definition.args or [])
        logger.info(f"Starting MCP server '{name}': {' '.join(command)}")
        try:
            process = await asyncio.create_subprocess_exec(
                *command,
                env=build_environment(definition.env),
                stdin=asyncio.subprocess.PIPE,
                stdout=asyncio.subprocess.PIPE,
                stderr=asyncio.subprocess.PIPE,
            )
        except OSError as e:
            self._fail(record, f"Failed to spawn: {e}")
            return self.status(name)

        record.process = process
        record.started_at = time.monotonic()

        if self._processes.get(name) is not record:
            # stop() was called while the spawn was in flight
            logger.info(f"MCP server '{name}' was stopped during startup")
            record.state = ProcessState.STOPPED
            self._terminate(record)
        else:
            record.state = ProcessState.RUNNING
            logger.info(f"MCP server '{name}' started with PID {process.pid}")

        record.watcher = asyncio.create_task(self._watch(record))
        self._watchers[record.watcher] = record
        record.watcher.add_done_callback(self._forget_watcher)
        return self.status(name)

    def stop(self, name: str) -> None:
        """Send SIGTERM and forget the process. Unknown names are ignored."""
        record = self._processes.pop(name, None)
        if record is None:
            return

        record.stopping = True
        if record.state == ProcessState.STARTING:
            # start() terminates it once the spawn returns
            return

        record.state = ProcessState.STOPPED
        self._terminate(record)
        logger.info(f"Stopped MCP server '{name}'")

    def status(self, name: str) -> ProcessStatus:
        """Current state of ``name``. Never blocks or raises."""
        record = self._processes.get(name)
        error = self._errors.get(name)

        if record is None or not record.is_live:
            return ProcessStatus(state=ProcessState.STOPPED, error=error)

        if record.state == ProcessState.STARTING:
            return ProcessStatus(state=ProcessState.STARTING)

        return ProcessStatus(
            state=ProcessState.RUNNING,
            pid=record.process.pid,
            uptime=round(time.monotonic() - record.started_at, 3),
        )

    def running_names(self) -> List[str]:
        """Names with a live process."""
        return [name for name, record in self._processes.items() if record.is_live]

    async def shutdown(self, timeout: float = 5.0) -> None:
        """Stop every process and wait up to ``timeout`` for them to exit.

        Processes stopped earlier but not yet exited are waited for too.
        Anything still alive after the timeout is killed.
        """
        for name in list(self._processes):
            self.stop(name)

        if not self._watchers:
            return

        _, pending = await asyncio.wait(list(self._watchers), timeout=timeout)
        for watcher in pending:
            record = self._watchers.get(watcher)
            if record is None or record.process.returncode is not None:
                continue
            logger.warning(f"MCP server '{record.name}' ignored SIGTERM, killing it")
            try:
                record.process.kill()
            except ProcessLookupError:
                pass
        if pending:
            await asyncio.wait(pending, timeout=timeout)

    async def _watch(self, record: RunningProcess) -> None:
        drain = asyncio.create_task(self._drain_stderr(record))
        returncode = await record.process.wait()
        # A grandchild may hold stderr open after the server itself exits
        done, _ = await asyncio.wait([drain], timeout=STDERR_FLUSH_TIMEOUT)
        if not done:
            drain.cancel()
        logger.info(f"MCP server '{record.name}' exited with code {returncode}")

        if returncode != 0 and not record.stopping:
            self._fail(record, f"Exited with code {returncode}")
        elif self._processes.get(record.name) is record:
            record.state = ProcessState.STOPPED
            del self._processes[record.name]

    @staticmethod
    async def _drain_stderr(record: RunningProcess) -> None:
        """Log the server's stderr so a full pipe never blocks it."""
        stream = record.process.stderr
        while True:
            chunk = await stream.read(STDERR_CHUNK_SIZE)
            if not chunk:
                return
            for line in chunk.decode(errors="replace").splitlines():
                logger.debug(f"MCP server '{record.name}' stderr: {line}")

    def _forget_watcher(self, watcher: asyncio.Task) -> None:
        self._watchers.pop(watcher, None)

    def _fail(self, record: RunningProcess, message: str) -> None:
        logger.error(f"MCP server '{record.name}' error: {message}")
        record.state = ProcessState.ERRORED
        # A newer process may have been registered under the same name
        current = self._processes.get(record.name)
        if current is record:
            del self._processes[record.name]
        if current is record or current is None:
            self._errors[record.name] = message
        record.state = ProcessState.STOPPED

    @staticmethod
    def _terminate(record: RunningProcess) -> None:
        if record.process is None or record.process.returncode is not None:
            return
        try:
            record.process.terminate()
        except ProcessLookupError:
            pass
