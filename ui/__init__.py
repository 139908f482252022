# UI module for the QR exchange
# Contains the exchange controller, orchestrator and PySide6 windows

# Widgets need PySide6; import them directly:
# from ui.main_window import MainWindow
# from ui.exchange_orchestrator import ExchangeOrchestrator
# from ui.qr_exchange_controller import QrExchangeController

__all__ = []
