"""Managed subprocess helpers."""

import asyncio
import logging

logger = logging.getLogger(__name__)


async def run_cmd(
    *args: str,
    timeout: float = 30.0,
) -> tuple[int, str, str]:
    """Run a command and return (returncode, stdout, stderr).

    The process is killed and reaped when ``timeout`` elapses or the caller is
    cancelled; the TimeoutError or CancelledError is then re-raised.
    """
    proc = await asyncio.create_subprocess_exec(
        *args,
        stdin=asyncio.subprocess.DEVNULL,
        stdout=asyncio.subprocess.PIPE,
        stderr=asyncio.subprocess.PIPE,
    )
    try:
        stdout, stderr = await asyncio.wait_for(proc.communicate(), timeout=timeout)
    except (asyncio.TimeoutError, asyncio.CancelledError):
        await _kill(proc)
        raise

    return (
        proc.returncode if proc.returncode is not None else -1,
        stdout.decode("utf-8", errors="replace").strip(),
        stderr.decode("utf-8", errors="replace").strip(),
    )


async def _kill(proc: asyncio.subprocess.Process) -> None:
    if proc.returncode is not None:
        return
    try:
        proc.kill()
    except ProcessLookupError:
        return
    await proc.wait()
    logger.warning(f"Killed process {proc.pid}")


def tail(text: str, lines: int = 20, limit: int = 2000) -> str:
    """Last ``lines`` lines of ``text``, capped at ``limit`` characters."""
    return "\n".join(text.splitlines()[-lines:])[-limit:]
