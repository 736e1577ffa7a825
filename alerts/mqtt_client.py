# ============================================================
# FILE: alerts/mqtt_client.py
# ============================================================

import json
import logging
from datetime import datetime
from typing import Any, Callable, Dict

import paho.mqtt.client as mqtt

from alerts.rate_limiter import RateLimiter

logger = logging.getLogger(__name__)

class MQTTClient:
    def __init__(self, broker: str, port: int, topics: Dict[str, str], enabled: bool = True):
        self.broker = broker
        self.port = port
        self.topics = topics
        self.enabled = enabled
        self.client = None
        
        if self.enabled:
            self._initialize()
        else:
            logger.info("MQTT disabled in configuration")
    
    def _initialize(self):
        try:
            self.client = mqtt.Client(mqtt.CallbackAPIVersion.VERSION2)
            self.client.on_connect = self._on_connect
            self.client.on_disconnect = self._on_disconnect
            self.client.connect(self.broker, self.port, 60)
            self.client.loop_start()
            logger.info(f"MQTT client initialized: {self.broker}:{self.port}")
        except OSError as e:
            logger.error(f"Failed to initialize MQTT: {e}")
            self.client = None
            self.enabled = False
    
    def _on_connect(self, client, userdata, flags, reason_code, properties):
        if reason_code == 0:
            logger.info("Connected to MQTT broker")
        else:
            logger.error(f"MQTT connection failed: {reason_code}")
    
    def _on_disconnect(self, client, userdata, flags, reason_code, properties):
        logger.warning(f"Disconnected from MQTT broker: {reason_code}")
    
    def publish(self, topic_key: str, payload: Dict[str, Any]):
        if not self.enabled or not self.client:
            return
        
        topic = self.topics.get(topic_key)
        if not topic:
            logger.error(f"Unknown topic key: {topic_key}")
            return
        
        message = json.dumps(payload)
        info = self.client.publish(topic, message)
        if info.rc != mqtt.MQTT_ERR_SUCCESS:
            logger.error(f"Failed to publish MQTT message to {topic}: {mqtt.error_string(info.rc)}")
            return
        logger.debug(f"Published to {topic}: {message}")
    
    def disconnect(self):
        if self.client:
            self.client.loop_stop()
            self.client.disconnect()
            self.client = None


def make_mqtt_callback(client: MQTTClient, limiter: RateLimiter,
                       status: Callable[[], str]) -> Callable[[], None]:
    """Build an on-detect callback publishing a motion event to the detection topic."""
    def on_detect():
        if not limiter.try_acquire():
            return
        client.publish('detection', {
            'event': 'motion_detected',
            'status': status(),
            'timestamp': datetime.now().isoformat()
        })
    
    return on_detect
