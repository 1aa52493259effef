#!/usr/bin/env python3
"""
Codepad - execution and persistence orchestration for an in-browser code editor.

Main entry point for the Codepad server application.
"""

import sys
from pathlib import Path

# Add src to Python path
sys.path.insert(0, str(Path(__file__).parent / "src"))

from src.codepad.main import app

if __name__ == "__main__":
    import uvicorn

    from config.settings import SERVER_HOST, SERVER_PORT

    uvicorn.run(app, host=SERVER_HOST, port=SERVER_PORT)
