"""
Centralized logging using Loguru with context-aware verbosity.

LOG() checks the verbosity of the ProgramState connected to the current
context, so tokenizer, compiler and engine code can log without passing
state around. Library use without a connected state logs nothing.

Usage:
    from embtext.lib.log import LOG, state_connectToLogger

    state_connectToLogger(state)                  # once, at pipeline start
    LOG("Compiled template", level=2)            # shown with -v and above
    LOG("Generated source: ...", level=3)        # shown with -vv and above
"""

from loguru import logger
from typing import Any, Optional
from contextvars import ContextVar
import sys

# Context variable to hold current ProgramState
_program_state: ContextVar[Optional[Any]] = ContextVar('program_state', default=None)

logger_format = (
    "<green>{time:HH:mm:ss}</green> │ "
    "<level>{level: <5}</level> │ "
    "<cyan>{module: <10}</cyan>:"
    "<cyan>{function: <20}</cyan> @ "
    "<cyan>{line: <4}</cyan> ║ "
    "<level>{message}</level>"
)

_handler_id: Optional[int] = None


def logger_configure() -> None:
    """
    Install the embtext stderr handler, replacing loguru's default

    Idempotent; called on the first state_connectToLogger() so that merely
    importing the library leaves the host application's loguru setup alone.
    """
    global _handler_id
    if _handler_id is not None:
        return
    logger.remove()
    _handler_id = logger.add(sys.stderr, format=logger_format, level="DEBUG")


def state_connectToLogger(state: Any) -> None:
    """
    Connect a ProgramState to the logging context.

    Args:
        state: Object with a `verbosity` attribute (ProgramState in the CLI)
    """
    logger_configure()
    _program_state.set(state)


def LOG(message: str, level: int = 1, **kwargs: Any) -> None:
    """
    Log message if current state's verbosity allows.

    Args:
        message: Log message to display
        level: Minimum verbosity level required (1=normal, 2=verbose, 3=debug)
        **kwargs: Additional loguru metadata
    """
    state = _program_state.get()

    if state and getattr(state, 'verbosity', 0) >= level:
        logger.opt(depth=1).debug(message, **kwargs)
