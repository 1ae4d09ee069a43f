"""stress-ng process management for load generation."""

import asyncio
import logging
import signal
from contextlib import asynccontextmanager
from typing import AsyncGenerator, List, Optional

from ..core.errors import SpawnError, UnexpectedExit
from ..core.models import ExitInfo, LoadKind, LoadProfile

DIAGNOSTIC_FD = 2


class LoadRun:
    """Handle to one running load generator process.

    The completion task finishes once the process has exited and been
    reaped; it doubles as the completion signal for timed waits.
    """

    def __init__(
        self,
        process: asyncio.subprocess.Process,
        profile: LoadProfile,
        terminate_signal: int = signal.SIGKILL,
    ):
        self.process = process
        self.profile = profile
        self.terminate_signal = terminate_signal
        self.returncode: Optional[int] = None
        self.completion: asyncio.Task = asyncio.create_task(self._wait())
        self._terminate_requested = False

    async def _wait(self) -> int:
        self.returncode = await self.process.wait()
        return self.returncode

    @property
    def pid(self) -> int:
        return self.process.pid

    def is_alive(self) -> bool:
        """Check, without blocking, whether the process is still running."""
        return not self.completion.done() and self.process.returncode is None

    async def wait_for_exit(self, timeout: Optional[float]) -> bool:
        """
        Wait up to timeout seconds for the process to exit.

        Returns:
            True if the process exited within the timeout
        """
        done, _ = await asyncio.wait({self.completion}, timeout=timeout)
        return self.completion in done

    async def terminate(self) -> ExitInfo:
        """
        Signal the process and wait until it is reaped.

        Raises:
            UnexpectedExit: The process had already exited on its own
        """
        if self._terminate_requested:
            raise RuntimeError(f"Load process {self.pid} was already terminated")
        self._terminate_requested = True

        if not self.is_alive():
            returncode = await self.completion
            raise UnexpectedExit(
                f"stress-ng exited on its own before termination, EC: {returncode}"
            )

        try:
            self.process.send_signal(self.terminate_signal)
        except ProcessLookupError:
            returncode = await self.completion
            raise UnexpectedExit(
                f"stress-ng exited on its own before termination, EC: {returncode}"
            )

        returncode = await self.completion
        return ExitInfo(returncode=returncode)


class LoadClient:
    """Starts stress-ng load generators."""

    def __init__(
        self,
        binary: str = "stress-ng",
        terminate_signal: int = signal.SIGKILL,
        diagnostic_fd: int = DIAGNOSTIC_FD,
    ):
        self.binary = binary
        self.terminate_signal = terminate_signal
        self.diagnostic_fd = diagnostic_fd

        logging.basicConfig(
            level=logging.INFO, format="%(asctime)s - %(levelname)s - %(message)s"
        )
        self.logger = logging.getLogger(__name__)

    def get_args(self, profile: LoadProfile) -> List[str]:
        """
        Build stress-ng arguments for a load profile.

        Args:
            profile: Kind, thread count and, for CPU load, load and method

        Returns:
            List of command line arguments (without the binary)
        """
        threads = str(profile.threads)

        if profile.kind is LoadKind.CPU:
            if profile.load is None or profile.method is None:
                raise ValueError("CPU load requires a load level and a method")
            return ["-l", str(profile.load), "-c", threads, "--cpu-method", profile.method]
        if profile.kind is LoadKind.IPSEC:
            return ["--ipsec-mb", threads]
        if profile.kind is LoadKind.VM:
            return ["--vm", threads]
        if profile.kind is LoadKind.MAXIMIZE:
            return ["--cpu", threads, "--vm", threads, "--maximize"]
        raise ValueError(f"Unknown load kind: {profile.kind}")

    def command(self, profile: LoadProfile) -> List[str]:
        """Full command line for a load profile."""
        return [self.binary] + self.get_args(profile)

    async def start(self, profile: LoadProfile) -> LoadRun:
        """
        Start a load generator.

        Its stdout and stderr go to the diagnostic stream.

        Raises:
            SpawnError: The process could not be created
        """
        cmd = self.command(profile)
        self.logger.info(f"Starting load: {' '.join(cmd)}")

        try:
            process = await asyncio.create_subprocess_exec(
                *cmd,
                stdout=self.diagnostic_fd,
                stderr=self.diagnostic_fd,
            )
        except OSError as e:
            raise SpawnError(
                f"Failed to start load generator: {e}\nCommand: {' '.join(cmd)}"
            ) from e

        self.logger.info(f"Load generator started: pid {process.pid}")
        return LoadRun(process, profile, self.terminate_signal)

    @asynccontextmanager
    async def run(self, profile: LoadProfile) -> AsyncGenerator[LoadRun, None]:
        """
        Context manager for a load generator lifecycle.

        Ensures the process is killed and reaped even if an exception
        occurs. Cleanup failures are logged and never replace the error
        already propagating.

        Usage:
            async with client.run(profile) as load_run:
                # Take measurements
                pass
        """
        load_run = await self.start(profile)
        try:
            yield load_run
        finally:
            if load_run.is_alive():
                await self._cleanup(load_run)

    async def _cleanup(self, load_run: LoadRun) -> None:
        """Best-effort kill of a load generator left running."""
        self.logger.info(f"Stopping load generator {load_run.pid}")
        try:
            load_run.process.send_signal(self.terminate_signal)
        except ProcessLookupError:
            # Already gone, still reap it below
            pass
        except OSError as e:
            self.logger.warning(f"Failed to signal load generator {load_run.pid}: {e}")
            return
        try:
            await asyncio.shield(load_run.completion)
        except Exception as e:
            self.logger.warning(f"Failed to stop load generator {load_run.pid}: {e}")
