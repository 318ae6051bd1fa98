"""AI-assisted capture-to-inventory pipeline for PantryPal."""

from .cache import QueryCache
from .camera import (
    CaptureController,
    CaptureDevice,
    FridgeCamera,
    ImageFileDevice,
    Permission,
    RawImage,
)
from .commit import CommitPipeline, CommitResult
from .config import ScannerConfig, VisionConfig, load_config
from .credentials import Credential, CredentialResolver, FernetCipher
from .detection import DetectionOutcome, DetectionService
from .errors import (
    CommitError,
    HardwareNotReady,
    PantryPalError,
    PermissionDenied,
    SessionBusy,
    TenantProvisioningError,
)
from .fallback import fallback_results
from .gateway import VisionGateway
from .models import DetectionCandidate, Identity, InventoryItem
from .normalizer import normalize
from .result import DetectionError, DetectionErrorKind, Err, Ok
from .session import ScanCoordinator, ScanSession, SelectionState, SessionState
from .vision import VisionBackend, create_backend

__all__ = [
    "CaptureController",
    "CaptureDevice",
    "FridgeCamera",
    "ImageFileDevice",
    "Permission",
    "RawImage",
    "Credential",
    "CredentialResolver",
    "FernetCipher",
    "VisionBackend",
    "create_backend",
    "VisionGateway",
    "normalize",
    "fallback_results",
    "DetectionService",
    "DetectionOutcome",
    "DetectionCandidate",
    "DetectionError",
    "DetectionErrorKind",
    "Ok",
    "Err",
    "SelectionState",
    "ScanSession",
    "SessionState",
    "ScanCoordinator",
    "CommitPipeline",
    "CommitResult",
    "QueryCache",
    "Identity",
    "InventoryItem",
    "PantryPalError",
    "PermissionDenied",
    "HardwareNotReady",
    "SessionBusy",
    "TenantProvisioningError",
    "CommitError",
    "ScannerConfig",
    "VisionConfig",
    "load_config",
]
