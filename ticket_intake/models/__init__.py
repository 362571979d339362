from .image_asset import ImageAsset, ObjectRef, QualityMetrics, RegionOfInterest
from .outcome import Duplicate, Failed, Rejected, Validated, ValidationOutcome
from .rules import IntakeRules, RegionFractions
from .storage_record import StorageRecord

__all__ = [
    "ImageAsset",
    "ObjectRef",
    "QualityMetrics",
    "RegionOfInterest",
    "Duplicate",
    "Failed",
    "Rejected",
    "Validated",
    "ValidationOutcome",
    "IntakeRules",
    "RegionFractions",
    "StorageRecord",
]
