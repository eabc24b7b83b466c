from flask import Flask, request

from api import metrics, ping

# Vercel: export a WSGI Flask app named `app` with ONLY API routes (no static serving)
app = Flask(__name__)

# Optional injected SheetConfig; when unset the metrics function reads the environment
app.config.setdefault('SHEET_CONFIG', None)


@app.route('/api/metrics', methods=['GET', 'OPTIONS'])
def metrics_route():
    return metrics.handler(request, config=app.config.get('SHEET_CONFIG'))


@app.route('/api/ping', methods=['GET', 'OPTIONS'])
def ping_route():
    return ping.handler(request)
