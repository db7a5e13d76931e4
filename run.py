import sys

import uvicorn

from vin_offers.config import get_settings, validate_settings

if __name__ == "__main__":
    try:
        validate_settings()
    except ValueError as e:
        print(f"❌ {e}", file=sys.stderr)
        sys.exit(1)

    settings = get_settings()
    # Single worker: handlers are sync and run in the event loop's
    # threadpool; the BigQuery client is a per-process singleton.
    uvicorn.run(
        "vin_offers.main:app",
        host="0.0.0.0",
        port=settings.port,
        workers=1,
    )
