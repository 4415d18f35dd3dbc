"""Line-oriented command loop for driving a session from a terminal.

Input: one JSON object per line matching the SessionCommand schema.
Output: one JSON acknowledgement per line, carrying the current snapshot.

Commands are validated at the boundary.  A malformed line gets an error
reply and the loop keeps going.
"""

from __future__ import annotations

import asyncio
import json
import logging
from typing import Any, Callable, TextIO

from pydantic import ValidationError

from timetoburn.core.session import ExposureSession
from timetoburn.models.command import SessionAction, SessionCommand

logger = logging.getLogger(__name__)


async def handle_command(session: ExposureSession, command: SessionCommand) -> dict[str, Any]:
    """Apply one validated command and build the acknowledgement."""
    action = command.action
    changed: bool | None = None

    if action is SessionAction.START:
        changed = await session.start()
    elif action is SessionAction.PAUSE:
        changed = await session.pause()
    elif action is SessionAction.RESUME:
        changed = await session.resume()
    elif action is SessionAction.RESET:
        await session.reset()
        changed = True
    elif action is SessionAction.APPLY_SUNSCREEN:
        changed = await session.apply_sunscreen()
    elif action is SessionAction.CANCEL_SUNSCREEN:
        changed = await session.cancel_sunscreen_timer()
    elif action is SessionAction.OBSERVE_UV:
        assessment = await session.observe_uv(
            command.uv_index,
            at=command.observed_at,
            environment=command.environment,
        )
        if assessment is None:
            return {"status": "ignored", "action": action.value, "detail": "out-of-order reading"}

    snapshot = await session.snapshot()
    reply: dict[str, Any] = {
        "status": "accepted",
        "action": action.value,
        "snapshot": snapshot.model_dump(mode="json"),
    }
    if changed is not None:
        reply["changed"] = changed
    return reply


def parse_command(line: str) -> SessionCommand | dict[str, Any]:
    """Validate *line*; returns the command or an error reply."""
    try:
        return SessionCommand.model_validate_json(line)
    except ValidationError as exc:
        logger.debug("Rejected command %r: %s", line, exc)
        return {
            "status": "error",
            "detail": [err["msg"] for err in exc.errors()],
        }


async def run_console(
    session: ExposureSession,
    reader: TextIO,
    write: Callable[[str], None],
) -> None:
    """Read commands from *reader* until EOF or ``quit``, then stop the session."""
    session.start_ticking()
    logger.info("Console attached to session %s", session.session_id)

    try:
        while True:
            line = await asyncio.to_thread(reader.readline)
            if not line:
                break
            line = line.strip()
            if not line:
                continue

            command = parse_command(line)
            if isinstance(command, dict):
                write(json.dumps(command))
                continue
            if command.action is SessionAction.QUIT:
                break

            write(json.dumps(await handle_command(session, command)))
    finally:
        final = await session.stop()
        write(json.dumps({"status": "stopped", "snapshot": final.model_dump(mode="json")}))
        logger.info("Console detached from session %s", session.session_id)
