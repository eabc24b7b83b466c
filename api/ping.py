import json


def handler(request):
    # Ultra-light health check - no config, no outbound calls
    headers = {
        "Content-Type": "application/json; charset=utf-8",
        "Access-Control-Allow-Origin": "*",
        "Access-Control-Allow-Methods": "GET",
        "Cache-Control": "no-store, no-cache, must-revalidate, max-age=0",
    }
    if request.method == "OPTIONS":
        return ("", 204, headers)
    return (json.dumps({"ok": True}), 200, headers)
