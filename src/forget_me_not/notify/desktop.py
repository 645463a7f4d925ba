# src/forget_me_not/notify/desktop.py

from __future__ import annotations

import logging
import wave
from pathlib import Path
from typing import Any

from plyer import notification

from ..errors import NotifyError

logger = logging.getLogger(__name__)


class DesktopNotifier:
    """
    Desktop popup (plyer) plus an optional sound.

    Notes:
    - A popup failure raises NotifyError; the scheduler decides what that means
      for the reminder.
    - Sound is best-effort: sounddevice/numpy are optional and imported on first
      use. A missing backend or unreadable file is logged, never raised.
    - Playback does not block; the scheduler thread must not stall on audio.
    """

    def __init__(self, *, app_name: str = "forget-me-not", timeout: int = 10) -> None:
        self.app_name = app_name
        self.timeout = int(timeout)
        self._sd: Any = None
        self._np: Any = None
        self._sound_disabled = False

    def notify(
            self,
            summary: str,
            body: str,
            image: str | None = None,
            sound: str | None = None,
    ) -> None:
        kwargs: dict[str, Any] = {
            "title": summary,
            "message": body,
            "app_name": self.app_name,
            "timeout": self.timeout,
        }
        if image:
            kwargs["app_icon"] = str(Path(image).expanduser())

        try:
            notification.notify(**kwargs)
        except Exception as e:
            raise NotifyError(f"desktop notification failed: {e!r}") from e

        logger.debug("Notification shown: %r", summary)

        if sound:
            self._play(sound)

    def _load_sound_backend(self) -> bool:
        if self._sd is not None:
            return True
        if self._sound_disabled:
            return False
        try:
            import numpy as np  # type: ignore
            import sounddevice as sd  # type: ignore
        except Exception as e:
            self._sound_disabled = True
            logger.warning(
                "Sound requested but sounddevice/numpy failed to import; "
                "install the 'sound' extra to enable it. Error: %s",
                repr(e),
            )
            return False
        self._sd = sd
        self._np = np
        return True

    def _play(self, sound: str) -> None:
        if not self._load_sound_backend():
            return

        path = Path(sound).expanduser()
        try:
            with wave.open(str(path), "rb") as wav:
                if wav.getsampwidth() != 2:
                    logger.warning("Only 16-bit WAV files are supported: %s", path)
                    return
                channels = wav.getnchannels()
                rate = wav.getframerate()
                frames = wav.readframes(wav.getnframes())
        except (OSError, wave.Error, EOFError):
            logger.warning("Cannot read sound file %s", path, exc_info=True)
            return

        data = self._np.frombuffer(frames, dtype=self._np.int16)
        if channels > 1:
            data = data.reshape(-1, channels)

        try:
            self._sd.play(data, rate)
        except Exception:
            logger.warning("Sound playback failed for %s", path, exc_info=True)
