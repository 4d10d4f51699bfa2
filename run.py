#!/usr/bin/env python3
"""
Vending Machine Backend Entry Point

Starts the FastAPI server using settings from VENDING_* environment variables.
"""

import sys
from pathlib import Path

# Add the project root to Python path
project_root = Path(__file__).parent
sys.path.insert(0, str(project_root))

from vending_machine.api import run_server
from vending_machine.config import get_config
from vending_machine.logging_config import setup_logging


if __name__ == "__main__":
    config = get_config()
    logger = setup_logging(config.log_level, config.log_format)

    print("🥤 Starting Vending Machine Backend...")
    print(f"💾 Database: {config.database_url}")
    print(f"💰 Currency: {config.currency_code}")
    print(f"🌐 API available at: http://localhost:{config.api_port}")
    print(f"📚 Documentation at: http://localhost:{config.api_port}/docs")
    print()

    try:
        run_server(
            host=config.api_host,
            port=config.api_port,
            debug=False,
            log_level=config.log_level.lower()
        )
    except KeyboardInterrupt:
        print("\n👋 Shutting down Vending Machine Backend...")
    except Exception as e:
        logger.exception("Server failed to start")
        print(f"❌ Error starting server: {e}")
        sys.exit(1)
