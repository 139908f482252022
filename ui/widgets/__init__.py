# UI widgets module

from ui.widgets.exchange_panel import ExchangePanel
from ui.widgets.qr_code_widget import QrCodeWidget
from ui.widgets.record_form_widget import RecordFormWidget
from ui.widgets.record_selection_panel import RecordSelectionPanel

__all__ = ['ExchangePanel', 'QrCodeWidget', 'RecordFormWidget', 'RecordSelectionPanel']
