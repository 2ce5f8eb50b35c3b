import uuid
from typing import Optional

from fastapi import FastAPI, WebSocket
from fastapi.responses import JSONResponse

from camflash.adapters.launcher.native_app import NativeAppLauncher
from camflash.adapters.watch.dir_observer import PollingDirectoryObserver
from camflash.orchestrator.device import CaptureDeviceAdapter
from camflash.orchestrator.native_capture import NativeCaptureWatcher
from camflash.orchestrator.state_machine import CommandSession
from camflash.services.config import Settings
from camflash.services.registry import ConnectionRegistry
from camflash.services.status_store import StatusStore


def make_driver(settings: Settings):
    # Camera driver: read from CAMERA_DRIVER env var (default: cv2)
    if settings.camera_driver == "cv2":
        from camflash.adapters.camera.cv2_camera import CV2Camera
        return CV2Camera(index_back=settings.camera_index_back, index_front=settings.camera_index_front)
    if settings.camera_driver == "mock":
        from camflash.adapters.camera.mock_camera import MockCamera
        return MockCamera()
    raise ValueError(f"unknown CAMERA_DRIVER {settings.camera_driver!r} (expected cv2 or mock)")


async def serve_connection(websocket, registry: ConnectionRegistry, status: StatusStore, make_session) -> str:
    """Accept, run one CommandSession to completion, and always unregister."""
    await websocket.accept()
    client_id = str(uuid.uuid4())
    registry.register(client_id, websocket)
    status.log(f"websocket connection established for client: {client_id}")
    try:
        await make_session(client_id, websocket).run()
    except Exception as e:
        status.error(f"client={client_id}: error in websocket communication: {type(e).__name__}: {e}")
    finally:
        registry.unregister(client_id)
        status.log(f"websocket connection closed for client: {client_id}")
    return client_id


def create_app(settings: Optional[Settings] = None, driver=None, launcher=None, observer=None) -> FastAPI:
    settings = settings or Settings.from_env()
    status = StatusStore()
    registry = ConnectionRegistry()

    driver = driver or make_driver(settings)
    status.log(f"camera driver: {driver.name}")
    device = CaptureDeviceAdapter(driver, status, settings.pictures_dir)

    launcher = launcher or NativeAppLauncher(status, settings.native_target, settings.native_focus_target)
    observer = observer or PollingDirectoryObserver(status, poll_interval=settings.native_poll_interval_s)
    watcher = NativeCaptureWatcher(
        launcher, observer, status, settings.pictures_dir,
        subdir=settings.native_subdir,
        pattern=settings.native_pattern,
        detect_timeout=settings.native_detect_timeout_s,
        stable_attempts=settings.native_stable_attempts,
        stable_delay=settings.native_stable_delay_s,
    )

    app = FastAPI(title="camflash")
    app.state.settings = settings
    app.state.status = status
    app.state.registry = registry
    app.state.device = device
    app.state.watcher = watcher

    def make_session(client_id: str, websocket) -> CommandSession:
        return CommandSession(client_id, websocket, device, watcher, status,
                              width=settings.photo_width, height=settings.photo_height)

    @app.websocket("/ws")
    async def ws_endpoint(websocket: WebSocket):
        await serve_connection(websocket, registry, status, make_session)

    @app.api_route("/ws", methods=["GET", "POST", "PUT", "PATCH", "DELETE", "HEAD", "OPTIONS"])
    def ws_plain_http():
        """Plain HTTP on the websocket path is a client error, whatever the method."""
        return JSONResponse(status_code=400, content={"ok": False, "error": "websocket upgrade required"})

    @app.get("/status")
    def get_status():
        return {
            "busy": status.busy,
            "last_error": status.last_error,
            "connections": len(registry),
            "logs": status.recent_logs(),
        }

    @app.get("/health")
    def health():
        """Check the pieces a capture depends on."""
        checks = {"api": True, "camera_driver": driver.name}
        checks["pictures_dir"] = str(settings.pictures_dir)
        checks["pictures_dir_ok"] = settings.pictures_dir.is_dir()
        checks["all_ok"] = checks["api"] and checks["pictures_dir_ok"]
        return checks

    return app
