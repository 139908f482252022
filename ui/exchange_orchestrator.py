"""
Exchange Orchestrator Module.

Builds the QR exchange from configuration.
Creates ConfigService and initializes all services with proper parameters.

Components:
1. Record store: JSON file or in-memory persistence
2. Session: current user and active patient
3. Image decoder: image → QR text
4. QR export: selection → QR image
5. Import reconciler: confirmed outcome → form pre-fill or replace
6. Controller: ties the above together for the UI

Follows:
- SRP: Only handles wiring
- DIP: Services receive parameters, not dependencies
- OCP: Easy to add new services
"""

import logging
from typing import Any, Callable, Dict, Optional

from core.interfaces.record_store_interface import IRecordStore
from core.models.records import RecordKind
from core.store import InMemoryRecordStore, JsonFileRecordStore
from services.impl.config_service import ConfigService
from services.impl.image_decoder_service import ImageDecoderService
from services.impl.import_reconciler_service import ImportReconcilerService
from services.impl.qr_export_service import QrExportService
from services.interfaces.import_reconciler_service_interface import ActiveView
from services.session_service import SessionService
from ui.qr_exchange_controller import QrExchangeController


FillFormHandler = Callable[[RecordKind, Dict[str, Any]], None]
SwitchViewHandler = Callable[[ActiveView], None]


class ExchangeOrchestrator:
    """
    Owns every service of the QR exchange.

    Responsibilities:
    - Initialize ConfigService
    - Create all services with parameters from config
    - Route the reconciler's form hooks to whichever window is attached
    - Provide access to individual services
    """

    def __init__(
        self,
        configPath: str = "config/application_config.json",
        recordStore: Optional[IRecordStore] = None
    ):
        """
        Initialize the exchange orchestrator.

        Args:
            configPath: Path to the application configuration file.
            recordStore: Store to use instead of the configured one.
        """
        self._logger = logging.getLogger(__name__)

        self._configService = ConfigService(configPath)
        self._logger.info("ConfigService initialized")

        self._fillFormHandler: Optional[FillFormHandler] = None
        self._switchViewHandler: Optional[SwitchViewHandler] = None

        debugBasePath = self._configService.getDebugBasePath()
        debugEnabled = self._configService.isDebugEnabled()

        self._initializeServices(debugBasePath, debugEnabled, recordStore)

        self._logger.info("ExchangeOrchestrator initialized successfully")

    def _initializeServices(
        self,
        debugBasePath: str,
        debugEnabled: bool,
        recordStore: Optional[IRecordStore]
    ) -> None:
        """
        Initialize all services with parameters from config.

        Following DIP: Services receive parameters, not IConfigService.
        """
        # ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━
        # Record Store
        # ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━
        if recordStore is not None:
            self._recordStore = recordStore
        elif self._configService.getRecordStoreBackend() == "memory":
            self._recordStore = InMemoryRecordStore()
        else:
            self._recordStore = JsonFileRecordStore(self._configService.getRecordStoreFile())
        self._logger.info(f"{type(self._recordStore).__name__} initialized")

        # ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━
        # Session Service
        # ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━
        self._sessionService = SessionService(self._configService.getSessionFile())
        self._logger.info("SessionService initialized")

        # ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━
        # Image Decoder Service
        # ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━
        self._imageDecoderService = ImageDecoderService(
            backend=self._configService.getQrBackend(),
            zxingTryRotate=self._configService.isQrTryRotate(),
            zxingTryDownscale=self._configService.isQrTryDownscale(),
            preprocessingEnabled=self._configService.isDecoderPreprocessingEnabled(),
            preprocessingMode=self._configService.getDecoderPreprocessingMode(),
            preprocessingTargetWidth=self._configService.getDecoderTargetWidth(),
            allowedExtensions=self._configService.getAllowedImageExtensions(),
            debugBasePath=debugBasePath,
            debugEnabled=debugEnabled
        )
        self._logger.info("ImageDecoderService initialized")

        # ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━
        # QR Export Service
        # ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━
        self._qrExportService = QrExportService(
            recordStore=self._recordStore,
            errorCorrection=self._configService.getErrorCorrection(),
            boxSize=self._configService.getQrBoxSize(),
            border=self._configService.getQrBorder(),
            exportDirectory=self._configService.getExportDirectory(),
            exportFilename=self._configService.getExportFilename(),
            debugBasePath=debugBasePath,
            debugEnabled=debugEnabled
        )
        self._logger.info("QrExportService initialized")

        # ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━
        # Import Reconciler Service
        # ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━
        self._importReconcilerService = ImportReconcilerService(
            recordStore=self._recordStore,
            fillForm=self._fillForm,
            switchView=self._switchView,
            debugBasePath=debugBasePath,
            debugEnabled=debugEnabled
        )
        self._logger.info("ImportReconcilerService initialized")

        # ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━
        # Controller
        # ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━
        self._controller = QrExchangeController(
            recordStore=self._recordStore,
            exportService=self._qrExportService,
            decoderService=self._imageDecoderService,
            reconcilerService=self._importReconcilerService,
            resolveContext=self._sessionService.resolvePatientContext
        )

    # ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━
    # Form Hooks
    # ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━

    def setFormHandlers(
        self,
        fillForm: Optional[FillFormHandler],
        switchView: Optional[SwitchViewHandler]
    ) -> None:
        """
        Attach the window that receives imported single records.

        Args:
            fillForm: Called as fillForm(kind, record).
            switchView: Called as switchView(view).
        """
        self._fillFormHandler = fillForm
        self._switchViewHandler = switchView

    def _fillForm(self, kind: RecordKind, record: Dict[str, Any]) -> None:
        if self._fillFormHandler is None:
            self._logger.warning(f"No form attached, imported {kind.value} not staged")
            return
        self._fillFormHandler(kind, record)

    def _switchView(self, view: ActiveView) -> None:
        if self._switchViewHandler is not None:
            self._switchViewHandler(view)

    # ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━
    # Service Getters (For UI/External Access)
    # ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━

    @property
    def configService(self) -> ConfigService:
        """Get the configuration service."""
        return self._configService

    @property
    def recordStore(self) -> IRecordStore:
        """Get the record store."""
        return self._recordStore

    @property
    def sessionService(self) -> SessionService:
        """Get the session service."""
        return self._sessionService

    @property
    def imageDecoderService(self) -> ImageDecoderService:
        """Get the image decoder service."""
        return self._imageDecoderService

    @property
    def qrExportService(self) -> QrExportService:
        """Get the QR export service."""
        return self._qrExportService

    @property
    def importReconcilerService(self) -> ImportReconcilerService:
        """Get the import reconciler service."""
        return self._importReconcilerService

    @property
    def controller(self) -> QrExchangeController:
        """Get the QR exchange controller."""
        return self._controller

    # ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━
    # Debug Control
    # ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━

    def setDebugEnabled(self, enabled: bool) -> None:
        """
        Enable or disable debug mode for all services.

        Args:
            enabled: True to enable debug output for all services.
        """
        self._configService.setDebugEnabled(enabled)
        self._imageDecoderService.setDebugEnabled(enabled)
        self._qrExportService.setDebugEnabled(enabled)
        self._importReconcilerService.setDebugEnabled(enabled)
        self._logger.info(f"Debug mode {'enabled' if enabled else 'disabled'} for all services")

    def isDebugEnabled(self) -> bool:
        """Check if debug mode is enabled."""
        return self._configService.isDebugEnabled()

    # ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━
    # Lifecycle Management
    # ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━

    def shutdown(self) -> None:
        """
        Abandon any running import and detach the window.

        Call this when the application is closing.
        """
        self._logger.info("Shutting down ExchangeOrchestrator...")
        self._controller.cancel()
        self.setFormHandlers(None, None)
        self._logger.info("ExchangeOrchestrator shutdown complete")
