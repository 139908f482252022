"""
Medical Records QR Exchange Application

Main entry point for the QR exchange desktop application.
Uses ExchangeOrchestrator to initialize all services following SOLID principles.

Architecture:
- ExchangeOrchestrator: Reads config and creates all services with parameters
- Services: Receive parameters, create core components internally
- QrExchangeController: Selection state and the export/import flow
- MainWindow: Receives orchestrator to access the controller and services
"""

import sys
import os
import logging

from PySide6.QtWidgets import QApplication

# Add project root to path
PROJECT_ROOT = os.path.dirname(os.path.abspath(__file__))
sys.path.insert(0, PROJECT_ROOT)

from ui.exchange_orchestrator import ExchangeOrchestrator
from ui.main_window import MainWindow


APP_VERSION = "1.0.0"


def setupLogging(debugMode: bool = False) -> None:
    """
    Setup application logging.

    Args:
        debugMode: If True, set log level to DEBUG.
    """
    level = logging.DEBUG if debugMode else logging.INFO
    logging.basicConfig(
        level=level,
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
        handlers=[
            logging.StreamHandler(sys.stdout)
        ]
    )


def createApplication(configPath: str = "config/application_config.json") -> tuple:
    """
    Create and wire up all application components using ExchangeOrchestrator.

    Args:
        configPath: Path to the application configuration file.

    Returns:
        Tuple of (QApplication, MainWindow, ExchangeOrchestrator).
    """
    app = QApplication(sys.argv)
    app.setApplicationName("Medical Records QR Exchange")
    app.setApplicationVersion(APP_VERSION)

    orchestrator = ExchangeOrchestrator(configPath)
    mainWindow = MainWindow(orchestrator)

    return app, mainWindow, orchestrator


def main():
    """Main entry point."""
    setupLogging(debugMode=os.environ.get("DEBUG", "").lower() == "true")

    logger = logging.getLogger(__name__)
    logger.info(f"Starting QR exchange application v{APP_VERSION}")

    try:
        app, mainWindow, orchestrator = createApplication(
            os.environ.get("QR_EXCHANGE_CONFIG", "config/application_config.json")
        )

        mainWindow.show()

        exitCode = app.exec()

        orchestrator.shutdown()

        logger.info("Application terminated")
        sys.exit(exitCode)

    except Exception as e:
        logger.error(f"Application failed to start: {e}")
        sys.exit(1)


if __name__ == "__main__":
    main()
