import logging

logger = logging.getLogger("api")


def handler(request, config=None):
    # Import heavy dependencies only inside handler
    from api._shared import json_response, build_metrics, SheetConfig, CACHE_OK

    if request.method == "OPTIONS":
        _, _, headers = json_response({})
        return ("", 204, headers)
    try:
        cfg = config if config is not None else SheetConfig.from_env()
        data = build_metrics(cfg)
        return json_response(data, 200, {"Cache-Control": CACHE_OK})
    except Exception as e:  # noqa: BLE001
        logger.exception("Error: %s", e)
        return json_response({"error": str(e)}, 500)
