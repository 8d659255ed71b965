#!/usr/bin/env python3
import logging
import os
import signal
import sys
import threading
from dataclasses import dataclass, field
from datetime import datetime
from pathlib import Path
from typing import List, Optional

from focus.display import DisplayController, XrandrDisplay
from focus.errors import ExternalCommandError, FileAccessError, PersistenceError
from focus.hosts import HostsFile
from focus.schedule import compute_blocked_domains, compute_display_target
from focus.settings import Settings
from focus.store import load_config

logger = logging.getLogger(__name__)

LOG_FORMAT = '%(asctime)s - %(levelname)s - %(message)s'


def setup_logging(settings: Settings):
    """Log to stdout and, when a log directory is configured, to daemon.log."""
    handlers = [logging.StreamHandler(sys.stdout)]
    if settings.log_dir:
        log_dir = Path(settings.log_dir)
        log_dir.mkdir(exist_ok=True, parents=True)
        handlers.append(logging.FileHandler(log_dir / "daemon.log"))

    logging.basicConfig(
        level=getattr(logging, settings.log_level, logging.INFO),
        format=LOG_FORMAT,
        handlers=handlers,
    )


@dataclass
class CycleResult:
    """What a single reconciliation pass did"""
    config_loaded: bool = False
    blocked_domains: List[str] = field(default_factory=list)
    hosts_changed: bool = False
    display_target: Optional[bool] = None
    display_applied: bool = False
    errors: List[str] = field(default_factory=list)


class FocusDaemon:
    def __init__(self, settings: Settings, display=None, clock=datetime.now):
        self.settings = settings
        self.clock = clock
        self.hosts = HostsFile(settings.hosts_path)
        if display is None and settings.display_enabled:
            display = XrandrDisplay(settings.display_command, settings.display_env)
        self.display = DisplayController(display) if display is not None else None
        self._stop = threading.Event()

    def install_signal_handlers(self):
        signal.signal(signal.SIGTERM, self.handle_signal)
        signal.signal(signal.SIGINT, self.handle_signal)

    def handle_signal(self, signum, frame):
        """Handle shutdown signals gracefully."""
        logger.info(f"Received signal {signum}, shutting down...")
        self.stop()

    def stop(self):
        self._stop.set()

    @property
    def running(self) -> bool:
        return not self._stop.is_set()

    def run_once(self) -> CycleResult:
        """Reconcile the hosts file and display once against the rules file."""
        result = CycleResult()
        now = self.clock()

        try:
            config = load_config(self.settings.config_path)
        except PersistenceError as e:
            logger.error(f"Error loading rules, skipping this cycle: {e}")
            result.errors.append(str(e))
            return result
        result.config_loaded = True

        # Hosts and display are reconciled independently
        try:
            result.blocked_domains = compute_blocked_domains(config.rules, now)
            result.hosts_changed = self.hosts.apply(result.blocked_domains)
        except FileAccessError as e:
            logger.error(f"Error updating hosts file: {e}")
            result.errors.append(str(e))
        except Exception as e:
            logger.exception("Unexpected error updating hosts file")
            result.errors.append(str(e))

        if self.display is not None:
            try:
                result.display_target = compute_display_target(config, now)
                result.display_applied = self.display.update(result.display_target)
            except ExternalCommandError as e:
                logger.error(f"Error updating display, will retry: {e}")
                result.errors.append(str(e))
            except Exception as e:
                self.display.last_applied = None
                logger.exception("Unexpected error updating display")
                result.errors.append(str(e))

        return result

    def run(self):
        """Main daemon loop."""
        logger.info(
            f"Focus daemon started (rules: {self.settings.config_path}, "
            f"every {self.settings.poll_interval}s)"
        )

        while self.running:
            try:
                result = self.run_once()
                if result.blocked_domains:
                    logger.debug(f"Blocking: {', '.join(result.blocked_domains)}")
            except Exception:
                logger.exception("Error in main loop")

            self._stop.wait(self.settings.poll_interval)

        logger.info("Focus daemon stopped")


def main(settings_path: str = None):
    """Entry point for the daemon."""
    if os.geteuid() != 0:
        print("This daemon must be run as root")
        sys.exit(1)

    settings = Settings(settings_path)
    setup_logging(settings)

    daemon = FocusDaemon(settings)
    daemon.install_signal_handlers()
    daemon.run()


if __name__ == "__main__":
    main()
