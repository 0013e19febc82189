"""Launch the generation proxy under uvicorn."""
from __future__ import annotations
import os

import uvicorn

def main() -> None:
    host = os.getenv("FORM_ASSIST_HOST", "127.0.0.1")
    port = int(os.getenv("FORM_ASSIST_PORT", "8888"))
    uvicorn.run(
        "form_assist.proxy.fastapi_app:app",
        host=host,
        port=port,
        log_config=None,
    )

if __name__ == "__main__":
    main()
