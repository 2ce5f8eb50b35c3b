import json
import logging
from enum import Enum

from pydantic import ValidationError
from starlette.concurrency import run_in_threadpool

from camflash.orchestrator.contracts import CameraFacing, CaptureResult, Command, CommandKind, FlashMode
from camflash.services.models import (
    INVALID_JSON, PROCESSING_ERROR, UNKNOWN_COMMAND,
    CommandEnvelope, ErrorResponse, FlashResponse, PhotoResponse, Response, to_frame,
)

COMMAND_TYPE = "command"
_KINDS = {k.value: k for k in CommandKind if k is not CommandKind.UNKNOWN}
_LOGGED_FRAME_CHARS = 200


class FrameDecodeError(ValueError):
    pass


def parse_command(text: str) -> Command:
    """
    Decode one frame into a Command.
    Field names match case-insensitively, values exactly. Raises FrameDecodeError
    when the frame is not a JSON object with string (or absent) fields.
    """
    try:
        raw = json.loads(text)
    except ValueError as e:
        raise FrameDecodeError(str(e)) from e
    if not isinstance(raw, dict):
        raise FrameDecodeError(f"expected a JSON object, got {type(raw).__name__}")
    try:
        env = CommandEnvelope.model_validate({str(k).lower(): v for k, v in raw.items()})
    except ValidationError as e:
        raise FrameDecodeError(str(e)) from e

    kind = CommandKind.UNKNOWN
    if env.type == COMMAND_TYPE:
        kind = _KINDS.get(env.command, CommandKind.UNKNOWN)
    return Command(kind=kind, raw_type=env.type, raw_command=env.command)


def frame_text(message: dict) -> str:
    text = message.get("text")
    if text is not None:
        return text
    return (message.get("bytes") or b"").decode("utf-8", errors="replace")


class SessionState(str, Enum):
    AWAITING_FRAME = "awaiting_frame"
    DISPATCHING = "dispatching"
    CLOSED = "closed"


class CommandSession:
    """
    One per websocket connection. Frames are handled strictly one at a time,
    so responses go out in request order; every frame gets exactly one response.
    """

    def __init__(self, client_id: str, websocket, device, watcher, status_store,
                 width: int = 1920, height: int = 1080,
                 facing: CameraFacing = CameraFacing.BACK):
        self.client_id = client_id
        self.websocket = websocket
        self.device = device
        self.watcher = watcher
        self.status = status_store
        self.width = width
        self.height = height
        self.facing = facing
        self.state = SessionState.AWAITING_FRAME
        self.frames_handled = 0

    async def run(self) -> None:
        try:
            while True:
                self.state = SessionState.AWAITING_FRAME
                message = await self.websocket.receive()
                if message["type"] == "websocket.disconnect":
                    self.status.log(f"client={self.client_id}: peer closed (code={message.get('code')})")
                    break
                self.state = SessionState.DISPATCHING
                response = await self.handle(frame_text(message))
                await self.websocket.send_text(to_frame(response))
                self.frames_handled += 1
        finally:
            self.state = SessionState.CLOSED

    async def handle(self, text: str) -> Response:
        self.status.log(f"client={self.client_id}: raw frame {text[:_LOGGED_FRAME_CHARS]!r}", logging.DEBUG)
        try:
            command = parse_command(text)
        except FrameDecodeError as e:
            self.status.error(f"client={self.client_id}: error parsing JSON: {e}")
            return ErrorResponse(message=INVALID_JSON)

        self.status.log(f"client={self.client_id}: type={command.raw_type} command={command.raw_command}")
        try:
            return await self.dispatch(command)
        except Exception as e:
            self.status.error(
                f"client={self.client_id} command={command.raw_command}: "
                f"error processing message: {type(e).__name__}: {e}"
            )
            return ErrorResponse(message=PROCESSING_ERROR)

    async def dispatch(self, command: Command) -> Response:
        kind = command.kind
        if kind is CommandKind.TAKE_PHOTO:
            return self._photo_or_error(command, await self._take_photo(FlashMode.ON))
        if kind is CommandKind.TAKE_PHOTO_NATIVE:
            return self._photo_or_error(command, await self.watcher.capture())
        if kind in (CommandKind.FLASH_ON, CommandKind.FLASH_OFF):
            on = kind is CommandKind.FLASH_ON
            # flash is applied through a full capture; the reply does not depend on it
            result = await self._take_photo(FlashMode.ON if on else FlashMode.OFF)
            if not result.ok:
                self.status.warning(
                    f"client={self.client_id} command={command.raw_command}: capture failed: {result.error}"
                )
            return FlashResponse(status="on" if on else "off")

        self.status.warning(
            f"client={self.client_id}: unknown command type={command.raw_type} command={command.raw_command}"
        )
        return ErrorResponse(message=UNKNOWN_COMMAND)

    async def _take_photo(self, flash_mode: FlashMode) -> CaptureResult:
        return await run_in_threadpool(self.device.take_photo, flash_mode, self.facing, self.width, self.height)

    def _photo_or_error(self, command: Command, result: CaptureResult) -> Response:
        if result.ok:
            return PhotoResponse.from_capture(result.file_path, result.image_data)
        self.status.error(
            f"client={self.client_id} command={command.raw_command}: [{result.error_code}] {result.error}"
        )
        return ErrorResponse(message=result.error or PROCESSING_ERROR)
