"""Running the llm command as a child process."""

from bot_typist.llm.child import ChildExitError, ChildPipe, SpawnError
from bot_typist.llm.service import (
    ProbeTimeoutError,
    Service,
    check_command_path,
    probe_version,
)

__all__ = [
    "ChildExitError",
    "ChildPipe",
    "ProbeTimeoutError",
    "Service",
    "SpawnError",
    "check_command_path",
    "probe_version",
]
