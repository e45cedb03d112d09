"""
Main entry point for the Melody Loop runner.

Usage (PowerShell):
    python main.py 1 2 3 4
    python main.py --replay

Each song is started by pressing its spell gem key. The run stops on
Ctrl+C, on the stop hotkey, or when the melody ends and hotkeys are off.
All melody work happens on the driver thread. Hotkey callbacks only post to it.
"""

from __future__ import annotations

import argparse
import threading
import time
from pathlib import Path
from typing import List, Optional

from keyboard_host import KeyboardHost
from hotkey_manager import HotkeyManager
from logger import StatusLogger
from melody import MelodyCommands, MelodyDriver, Sequencer, Severity
from settings_manager import SettingsManager


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Cycle up to five songs by pressing their spell gem keys.")
    parser.add_argument("gems", nargs="*", help="1-based spell gem numbers, e.g. 1 2 3 4")
    parser.add_argument("--settings", type=Path, default=None, help="Path to the settings JSON file")
    parser.add_argument("--replay", action="store_true", help="Play the last saved melody")
    parser.add_argument("--no-hotkeys", action="store_true", help="Do not register global hotkeys")
    return parser


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)

    logger = StatusLogger(echo=print)
    settings_manager = SettingsManager(args.settings)
    settings_manager.on_log(logger.callback("settings", "WARNING"))
    settings = settings_manager.load()

    host = KeyboardHost(settings.keyboard)
    host.register_notify_callback(
        lambda msg, severity: (logger.log_warning if severity == Severity.FAILURE else logger.log_info)(msg, "chat")
    )
    sequencer = Sequencer(host, settings.melody)
    sequencer.on_log(logger.callback("sequencer"))
    commands = MelodyCommands(sequencer, host)
    driver = MelodyDriver(sequencer, settings.poll_interval_ms)
    driver.on_log(logger.callback("driver", "DEBUG"))
    driver.on_done(lambda ok, msg: (logger.log_info if ok else logger.log_error)(msg, "driver"))

    gems = [str(slot + 1) for slot in settings.last_melody] if args.replay else list(args.gems)
    if not gems:
        logger.log_error("No melody given. Usage example: python main.py 1 2 3 4")
        return 2

    started = threading.Event()

    def begin() -> None:
        if commands.melody(gems):
            settings_manager.remember_melody(settings, commands.last_melody)
            logger.update_status("Playing")
            started.set()
        else:
            driver.stop()

    hotkeys = HotkeyManager(settings.start_hotkey, settings.stop_hotkey)
    hotkeys.on_log(logger.callback("hotkeys", "WARNING"))
    hotkeys.bind_replay(lambda: driver.submit(commands.replay))
    hotkeys.bind_stop(lambda: driver.submit(commands.stopsong))
    hotkeys_enabled = not args.no_hotkeys and hotkeys.enable_hotkeys()
    if hotkeys_enabled:
        logger.log_info(
            f"Hotkeys: replay={hotkeys.get_start_hotkey()}, stop={hotkeys.get_stop_hotkey()}", "hotkeys"
        )

    driver.submit(begin)
    driver.start()
    try:
        while driver.is_running():
            # With hotkeys the runner stays up so the melody can be replayed.
            if started.is_set() and not sequencer.is_active() and not hotkeys_enabled:
                driver.stop()
                break
            time.sleep(0.2)
    except KeyboardInterrupt:
        driver.submit(commands.stopsong)
        time.sleep(settings.poll_interval_ms / 1000.0 * 2)
        driver.stop()
    finally:
        hotkeys.disable_hotkeys()

    logger.update_status("Idle")
    return 0 if started.is_set() else 1


if __name__ == "__main__":
    raise SystemExit(main())
