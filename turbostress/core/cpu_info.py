"""System information preamble for the result stream."""

import aiofiles

CPU_INFO_PATH = "/proc/cpuinfo"
PREAMBLE_SEPARATOR = "#---"


async def read_cpu_info(path: str = CPU_INFO_PATH) -> str:
    """
    Read the CPU description of this machine.

    Args:
        path: File to read (defaults to /proc/cpuinfo)

    Returns:
        The file content

    Raises:
        OSError: If the file cannot be read
    """
    async with aiofiles.open(path, "r") as f:
        return await f.read()


def format_preamble(cpu_info: str) -> str:
    """Wrap CPU info so result readers can skip it."""
    return f"{cpu_info}\n{PREAMBLE_SEPARATOR}\n"
