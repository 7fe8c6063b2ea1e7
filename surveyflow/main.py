from __future__ import annotations
import os
if os.getenv("DEBUG_ATTACH") == "1":
    import debugpy

    if os.environ.get("DEBUGPY_LISTENING") != "1":
        debugpy.listen(("0.0.0.0", 5678))
        os.environ["DEBUGPY_LISTENING"] = "1"
        print("Waiting for debugger attach on port 5678...")

    if not debugpy.is_client_connected():
        debugpy.wait_for_client()
from surveyflow.core.config import configure_logging
from surveyflow.UI import run_app


def main() -> None:
    """Launch the Streamlit survey portal (``streamlit run surveyflow/main.py``)."""

    configure_logging()
    run_app()


if __name__ == "__main__":
    main()
