from __future__ import annotations

import logging
import shlex
import subprocess

from daily_salah.config import Settings

logger = logging.getLogger(__name__)


class Notifier:
    def send(self, prayer: str) -> None:
        raise NotImplementedError


class NoopNotifier(Notifier):
    def send(self, prayer: str) -> None:
        logger.info("It is time for %s.", prayer)


class CommandNotifier(Notifier):
    """Plays the adhan by spawning a player command, e.g. ``mpv --no-video azan.mp3``.

    The process is not waited on. ``{prayer}`` in the command is replaced with
    the lower-case prayer name, so a per-prayer recording (``fajr.mp3``) can be chosen.
    """

    def __init__(self, command: str) -> None:
        self.argv = shlex.split(command)

    def send(self, prayer: str) -> None:
        argv = [arg.replace("{prayer}", prayer.lower()) for arg in self.argv]
        try:
            subprocess.Popen(argv, stdout=subprocess.DEVNULL, stderr=subprocess.DEVNULL)
        except OSError as exc:
            logger.warning("Adhan command failed to start: %s", exc)


def build_notifier(settings: Settings) -> Notifier:
    if settings.adhan_command:
        return CommandNotifier(settings.adhan_command)
    return NoopNotifier()
