# utils/diff_runner.py

import asyncio

from errors import DiffExecutionError


async def run_diff_command(command: str, timeout: float = 30.0) -> str:
    """
    Run the configured diff command through the shell and return its stdout.

    Raises DiffExecutionError when the command exits non-zero or is still
    running when the deadline expires (the process is killed first).
    """
    try:
        proc = await asyncio.create_subprocess_shell(
            command,
            stdout=asyncio.subprocess.PIPE,
            stderr=asyncio.subprocess.PIPE,
        )
    except OSError as e:
        raise DiffExecutionError(f"failed to execute diff command: {e}") from e

    try:
        stdout, stderr = await asyncio.wait_for(proc.communicate(), timeout)
    except asyncio.TimeoutError as e:
        proc.kill()
        await proc.wait()
        raise DiffExecutionError(f"diff command timed out after {timeout}s") from e

    if proc.returncode != 0:
        error_msg = stderr.decode(errors="replace").strip()
        raise DiffExecutionError(f"diff command failed with exit code {proc.returncode}: {error_msg}")

    return stdout.decode(errors="replace")
