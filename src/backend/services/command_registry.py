"""Registry of menu commands that act on the active collection."""
from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Callable, Dict, List, Optional

from common.errors import CommandError
from common.log_utils import log_debug, log_error, log_info


class RunMode(Enum):
    IMMEDIATE = "immediate"  # runs without asking anything
    INTERACTIVE = "interactive"  # opens dialogs/windows


@dataclass
class CommandContext:
    """Implicit context of a command: the collection active when it was invoked."""

    collection_id: Optional[int]


CommandCallback = Callable[[CommandContext], None]


@dataclass(frozen=True)
class CommandSpec:
    id: str
    menu_path: str
    tooltip: str
    run_mode: RunMode
    callback: CommandCallback
    shortcut: Optional[str] = None
    needs_collection: bool = True


class CommandRegistry:
    """Ordered command table consumed by the main window's menu builder."""

    def __init__(self) -> None:
        self._commands: Dict[str, CommandSpec] = {}

    def register(self, spec: CommandSpec) -> CommandSpec:
        if spec.id in self._commands:
            raise CommandError(f"Command '{spec.id}' is already registered")
        self._commands[spec.id] = spec
        log_debug(f"Registered command {spec.id} ({spec.menu_path})", "COMMANDS")
        return spec

    def get(self, command_id: str) -> CommandSpec:
        try:
            return self._commands[command_id]
        except KeyError:
            raise CommandError(f"Unknown command '{command_id}'") from None

    def ids(self) -> List[str]:
        return list(self._commands)

    def specs(self) -> List[CommandSpec]:
        return list(self._commands.values())

    def run(self, command_id: str, context: CommandContext) -> bool:
        """Invoke a command. Returns False if it was skipped for lack of context."""
        spec = self.get(command_id)
        if spec.needs_collection and context.collection_id is None:
            log_error(f"{command_id}: no active collection", "COMMANDS")
            return False
        log_info(f"Running {command_id} on collection {context.collection_id}", "COMMANDS")
        spec.callback(context)
        return True

    def __contains__(self, command_id: object) -> bool:
        return command_id in self._commands

    def __len__(self) -> int:
        return len(self._commands)
