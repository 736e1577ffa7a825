# ============================================================
# FILE: main.py
# ============================================================

import logging
import os
import signal
import sys
import threading
from typing import Callable, List

from dotenv import load_dotenv

from alerts.email_notifier import EmailNotifier, make_email_callback
from alerts.mqtt_client import MQTTClient, make_mqtt_callback
from alerts.rate_limiter import RateLimiter
from capture.camera import Camera
from capture.errors import DeviceClosedError, MotionDetectorError, ResourceReleaseError
from capture.motion_detector import MotionDetector
from capture.policy import Sensitivity
from ui.display import Display, HeadlessDisplay
from utils.config_loader import Config

logger = logging.getLogger(__name__)

def setup_logging(config: Config):
    level = getattr(logging, str(config.get('logging.level', 'INFO')).upper(), logging.INFO)
    handlers = [logging.StreamHandler()]
    log_file = config.get('logging.file')
    if log_file:
        handlers.append(logging.FileHandler(log_file))

    logging.basicConfig(
        level=level,
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
        handlers=handlers
    )

class MotionDetectorApp:
    def __init__(self, config: Config):
        self.config = config
        self.detector = None
        self.mqtt_client = None
        self.callbacks: List[Callable[[], None]] = []

        self._initialize_notifiers()
        try:
            self._initialize_detector()
        except MotionDetectorError:
            if self.mqtt_client:
                self.mqtt_client.disconnect()
            raise

        signal.signal(signal.SIGINT, self._signal_handler)
        signal.signal(signal.SIGTERM, self._signal_handler)

    def _initialize_notifiers(self):
        if self.config.get('email.enabled', False):
            try:
                notifier = EmailNotifier.from_env(
                    recipients=self.config.get('email.recipients') or None,
                    smtp_host=self.config.get('email.smtp_host', 'smtp.gmail.com'),
                    smtp_port=self.config.get('email.smtp_port', 587)
                )
            except ValueError as e:
                logger.warning(f"Email notifications disabled: {e}")
            else:
                limiter = RateLimiter(self.config.get('email.cooldown_seconds', 15))
                self.callbacks.append(make_email_callback(notifier, limiter))
                logger.info("Email notifications enabled")

        if self.config.get('mqtt.enabled', False):
            self.mqtt_client = MQTTClient(
                self.config.get('mqtt.broker', 'localhost'),
                self.config.get('mqtt.port', 1883),
                self.config.get('mqtt.topics', {})
            )
            limiter = RateLimiter(self.config.get('mqtt.cooldown_seconds', 15))
            self.callbacks.append(make_mqtt_callback(self.mqtt_client, limiter, lambda: self.detector.status))

    def _on_detect(self):
        for callback in self.callbacks:
            callback()

    def _initialize_detector(self):
        device_id = self.config.get('system.camera_device_id', 0)
        width = self.config.get('system.resolution.width')
        height = self.config.get('system.resolution.height')
        resolution = (width, height) if width and height else None

        display_factory = HeadlessDisplay if self.config.get('system.headless', False) else Display

        self.detector = MotionDetector(
            device_id=device_id,
            window_title=self.config.get('system.window_title', 'Motion Detector'),
            on_detect=self._on_detect if self.callbacks else None,
            min_area=Sensitivity.parse(self.config.get('motion.sensitivity', 'not_sensitive')),
            queue_size=self.config.get('alerts.queue_size', 64),
            background_options=self.config.get('motion.background', {}),
            source_factory=lambda device: Camera(device, resolution),
            display_factory=display_factory
        )

    def _signal_handler(self, sig, frame):
        logger.info("Shutdown signal received")
        sys.exit(0)

    def run(self) -> int:
        if self.config.get('ui.enabled', False) or os.getenv('START_WEB_UI', 'false').lower() == 'true':
            from ui.app import start_web_ui
            threading.Thread(
                target=start_web_ui,
                args=(self.detector, self.config.get('ui.host', '0.0.0.0'), self.config.get('ui.port', 5000)),
                daemon=True
            ).start()

        try:
            self.detector.start()
            return 0
        except DeviceClosedError as e:
            logger.error(f"Motion detection stopped: {e}")
            return 1
        finally:
            self.stop()

    def stop(self):
        logger.info("Stopping motion detector...")
        try:
            self.detector.close()
        except ResourceReleaseError as e:
            logger.error(f"Shutdown incomplete: {e}")
        if self.mqtt_client:
            self.mqtt_client.disconnect()
        logger.info("Motion detector stopped")

def main() -> int:
    load_dotenv()
    config = Config(os.getenv('MOTION_DETECTOR_CONFIG', 'config.yaml'))
    setup_logging(config)

    try:
        app = MotionDetectorApp(config)
    except MotionDetectorError as e:
        logger.error(f"Could not start motion detector: {e}")
        return 1

    return app.run()

if __name__ == "__main__":
    sys.exit(main())
