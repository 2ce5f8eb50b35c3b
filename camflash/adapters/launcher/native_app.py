"""
Launcher for the platform's own camera application, cross-platform.

Target resolution:
  1. Windows: a protocol URI (e.g. "microsoft.windows.camera:") opened with the
     default handler via os.startfile
  2. macOS:   an application name opened with `open -a`, or a URI with `open`
  3. Linux:   an executable on PATH (e.g. cheese), else xdg-open

Launching never waits for the application to exit.
"""

import os
import shutil
import subprocess
import sys
from typing import Optional


class NativeAppLauncher:
    def __init__(self, status_store, target: str, focus_target: Optional[str] = None):
        self.status = status_store
        self.target = target
        self.focus_target = focus_target

    def launch(self) -> bool:
        self.status.log(f"launcher: starting {self.target}")
        return self._open(self.target)

    def focus(self) -> bool:
        """Bring the camera app to the front. Best effort."""
        if not self.focus_target:
            return True
        return self._open(self.focus_target)

    def _open(self, target: str) -> bool:
        try:
            if sys.platform == "win32":
                os.startfile(target)
            elif sys.platform == "darwin":
                if ":" in target:
                    subprocess.Popen(["open", target])
                else:
                    subprocess.Popen(["open", "-a", target])
            elif shutil.which(target):
                subprocess.Popen([target], stdout=subprocess.DEVNULL, stderr=subprocess.DEVNULL)
            elif shutil.which("xdg-open"):
                subprocess.Popen(["xdg-open", target], stdout=subprocess.DEVNULL, stderr=subprocess.DEVNULL)
            else:
                self.status.warning(f"launcher: no way to open {target}")
                return False
        except OSError as e:
            self.status.warning(f"launcher: failed to open {target}: {e}")
            return False
        return True
