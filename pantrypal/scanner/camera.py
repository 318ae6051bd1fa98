"""Image capture devices and the capture controller."""

from __future__ import annotations

import asyncio
import base64
import logging
import mimetypes
import os
from abc import ABC, abstractmethod
from dataclasses import dataclass
from datetime import datetime, timezone
from enum import Enum
from pathlib import Path
from typing import Callable

from .errors import HardwareNotReady, PermissionDenied

logger = logging.getLogger(__name__)


class Permission(Enum):
    GRANTED = "granted"
    DENIED = "denied"


@dataclass
class RawImage:
    data: bytes
    media_type: str
    captured_at: str  # ISO8601
    path: str | None = None

    @property
    def b64(self) -> str:
        return base64.standard_b64encode(self.data).decode()


class CaptureDevice(ABC):
    """A source of still images."""

    def request_permission(self) -> Permission:
        return Permission.GRANTED

    @abstractmethod
    def ready(self) -> bool:
        """True once the device can deliver a frame."""
        ...

    @abstractmethod
    async def capture(self) -> RawImage:
        ...


class FridgeCamera(CaptureDevice):
    """Capture JPEG frames from a USB camera via OpenCV."""

    def __init__(self, camera_index: int = 0, save_dir: str = "/tmp/pantrypal") -> None:
        self._camera_index = camera_index
        self._save_dir = Path(save_dir)
        self._save_dir.mkdir(parents=True, exist_ok=True)
        self._cap = None

    def request_permission(self) -> Permission:
        node = Path(f"/dev/video{self._camera_index}")
        if node.exists() and not os.access(node, os.R_OK | os.W_OK):
            logger.warning("No access to %s", node)
            return Permission.DENIED
        return Permission.GRANTED

    def open(self) -> None:
        cv2 = _import_cv2()
        cap = cv2.VideoCapture(self._camera_index)
        if not cap.isOpened():
            cap.release()
            raise HardwareNotReady(
                f"Camera {self._camera_index} could not be opened. "
                f"Check the connection."
            )
        self._cap = cap

    def close(self) -> None:
        if self._cap is not None:
            self._cap.release()
            self._cap = None

    def ready(self) -> bool:
        return self._cap is not None and bool(self._cap.isOpened())

    async def capture(self) -> RawImage:
        if not self.ready():
            raise HardwareNotReady(f"Camera {self._camera_index} is not ready")
        return await asyncio.to_thread(self._grab)

    def _grab(self) -> RawImage:
        cv2 = _import_cv2()
        ret, frame = self._cap.read()
        if not ret or frame is None:
            raise HardwareNotReady(
                f"Could not read a frame from camera {self._camera_index}"
            )
        ok, buf = cv2.imencode(".jpg", frame)
        if not ok:
            raise HardwareNotReady(
                f"Could not encode the frame from camera {self._camera_index}"
            )
        data = buf.tobytes()

        now = datetime.now(timezone.utc)
        filename = f"cam{self._camera_index}_{now.strftime('%Y%m%d_%H%M%S')}.jpg"
        filepath = self._save_dir / filename
        filepath.write_bytes(data)

        return RawImage(
            data=data,
            media_type="image/jpeg",
            captured_at=now.isoformat(),
            path=str(filepath),
        )

    @staticmethod
    def list_cameras(max_check: int = 10) -> list[int]:
        """List available USB camera indices by probing."""
        cv2 = _import_cv2()

        available: list[int] = []
        for i in range(max_check):
            cap = cv2.VideoCapture(i)
            if cap.isOpened():
                available.append(i)
                cap.release()
        return available


class ImageFileDevice(CaptureDevice):
    """Serve an existing image file as if it had just been captured."""

    def __init__(self, path: str | Path) -> None:
        self._path = Path(path)

    def ready(self) -> bool:
        return self._path.is_file()

    async def capture(self) -> RawImage:
        if not self.ready():
            raise HardwareNotReady(f"Image file not found: {self._path}")
        data = await asyncio.to_thread(self._path.read_bytes)
        return RawImage(
            data=data,
            media_type=mimetypes.guess_type(self._path.name)[0] or "image/jpeg",
            captured_at=datetime.now(timezone.utc).isoformat(),
            path=str(self._path),
        )


class CaptureController:
    """Owns the permission state of a device and triggers acquisition.

    ``on_captured`` is called once per successful capture, e.g. to fire a
    haptic or visual acknowledgment.
    """

    def __init__(
        self,
        device: CaptureDevice,
        on_captured: Callable[[RawImage], None] | None = None,
    ) -> None:
        self._device = device
        self._on_captured = on_captured
        self._permission: Permission | None = None

    @property
    def permission(self) -> Permission | None:
        return self._permission

    def request_permission(self) -> Permission:
        self._permission = self._device.request_permission()
        if self._permission is Permission.DENIED:
            logger.info("Camera permission denied")
        return self._permission

    async def capture(self) -> RawImage:
        if self._permission is not Permission.GRANTED:
            raise PermissionDenied()
        if not self._device.ready():
            raise HardwareNotReady("Capture device is not ready yet")

        image = await self._device.capture()
        logger.debug("Captured %d bytes (%s)", len(image.data), image.media_type)
        if self._on_captured is not None:
            self._on_captured(image)
        return image


def _import_cv2():
    try:
        import cv2
    except ImportError:
        raise ImportError(
            "opencv-python is required: pip install opencv-python"
        ) from None
    return cv2
