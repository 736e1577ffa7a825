# ============================================================
# FILE: ui/app.py
# ============================================================

import time
import logging

from flask import Flask, Response, jsonify

from capture.errors import SnapshotUnavailableError

logger = logging.getLogger(__name__)

app = Flask(__name__)
detector = None  # Will be set when starting the UI

def init_app(motion_detector):
    global detector
    detector = motion_detector
    return app

@app.route('/api/status')
def get_status():
    if not detector:
        return jsonify({'status': 'offline'}), 503
    
    return jsonify({
        'status': detector.status,
        'min_area': detector.min_area,
        'device_id': detector.device_id
    })

@app.route('/api/snapshot')
def snapshot():
    if not detector:
        return jsonify({'error': 'Detector not initialized'}), 503
    
    try:
        data = detector.snapshot_jpg()
    except SnapshotUnavailableError as e:
        return jsonify({'error': str(e)}), 503
    
    return Response(data, mimetype='image/jpeg')

@app.route('/api/live-stream')
def live_stream():
    def generate(frame_interval=0.1):
        while detector and not detector.closed:
            try:
                frame_bytes = detector.snapshot_jpg()
            except SnapshotUnavailableError:
                time.sleep(frame_interval)
                continue
            yield (b'--frame\r\n'
                   b'Content-Type: image/jpeg\r\n\r\n' + frame_bytes + b'\r\n')
            time.sleep(frame_interval)
    
    return Response(generate(), mimetype='multipart/x-mixed-replace; boundary=frame')

def start_web_ui(motion_detector, host='0.0.0.0', port=5000):
    init_app(motion_detector)
    logger.info(f"Starting web UI on {host}:{port}")
    app.run(host=host, port=port, debug=False, threaded=True, use_reloader=False)
