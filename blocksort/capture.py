"""
Still-image capture via an external camera utility.

`raspistill` docs: https://www.raspberrypi.org/documentation/accessories/camera.html#raspistill

`libcamera-still` accepts the same flags and can be configured as the command
on newer Raspberry Pi OS releases.
"""

import asyncio
import logging
from pathlib import Path
from typing import List, Optional

from blocksort.config import CaptureSettings

logger = logging.getLogger(__name__)


class CaptureDevice:
    """Captures square frames of an item on the belt."""

    def __init__(
        self,
        output_path: str = "public/currentBlock.jpg",
        command: str = "raspistill",
        resolution: int = 1000,
        timeout: int = 1000,
        public_dir: Optional[str] = "public",
    ):
        """
        Initialize capture device.

        Args:
            output_path: Well-known path each frame is written to
            command: Capture executable
            resolution: Width and height of the frame (pixels)
            timeout: Delay before the shot is taken (ms)
            public_dir: Directory served to the classifier; references are
                made relative to it. None sends filesystem paths instead.
        """
        self.output_path = Path(output_path)
        self.command = command
        self.resolution = resolution
        self.timeout = timeout
        self.public_dir = Path(public_dir) if public_dir else None

    @classmethod
    def from_settings(cls, settings: CaptureSettings) -> "CaptureDevice":
        return cls(
            output_path=settings.output,
            command=settings.command,
            resolution=settings.resolution,
            timeout=settings.timeout,
            public_dir=settings.public_dir,
        )

    def build_command(self, output_path: Path) -> List[str]:
        return [
            self.command,
            "-n",
            "-o",
            str(output_path),
            "--width",
            str(self.resolution),
            "--height",
            str(self.resolution),
            "--timeout",
            str(self.timeout),
        ]

    async def capture(self, output_path: Optional[Path] = None) -> Optional[Path]:
        """
        Capture a frame.

        Never raises: every failure is logged and reported as ``None``.

        Args:
            output_path: Override for the output file

        Returns:
            Path to the new frame, or None if nothing was captured
        """
        path = Path(output_path) if output_path is not None else self.output_path

        # A stale frame must never be mistaken for a new one
        try:
            path.unlink()
        except FileNotFoundError:
            pass
        except OSError as e:
            logger.error(f"Could not remove stale frame {path}: {e}")
            return None

        try:
            path.parent.mkdir(parents=True, exist_ok=True)
            proc = await asyncio.create_subprocess_exec(
                *self.build_command(path),
                stdout=asyncio.subprocess.PIPE,
                stderr=asyncio.subprocess.PIPE,
            )
            stdout, stderr = await proc.communicate()
        except OSError as e:
            logger.error(f"{self.command} could not be started: {e}")
            return None

        out = stdout.decode(errors="replace").strip()
        err = stderr.decode(errors="replace").strip()

        if out:
            logger.info(f"{self.command}:\n{out}")
        if err:
            logger.warning(f"{self.command} stderr:\n{err}")

        if proc.returncode != 0:
            logger.error(f"{self.command} exited with code {proc.returncode}")
            return None

        if not path.exists():
            logger.error(f"{self.command} finished but wrote no frame to {path}")
            return None

        return path

    def reference(self, path: Path) -> str:
        """
        Reference the classifier uses to fetch a frame.

        Args:
            path: Captured frame

        Returns:
            '/'-prefixed path relative to the public directory, or the
            filesystem path when no public directory is set
        """
        if self.public_dir is not None:
            try:
                return "/" + Path(path).relative_to(self.public_dir).as_posix()
            except ValueError:
                pass
        return str(path)
