"""Database model type definitions."""

from src.models.character_sheet import CharacterSheet
from src.models.image import GeneratedImage, ImageQuality, UpscaledImage
from src.models.notification import Notification, NotificationKind
from src.models.order import Order, OrderStatus, OrderTier
from src.models.training_job import TrainingJob, TrainingJobStatus
from src.models.upload import Upload

__all__ = [
    "Order",
    "OrderStatus",
    "OrderTier",
    "TrainingJob",
    "TrainingJobStatus",
    "GeneratedImage",
    "ImageQuality",
    "UpscaledImage",
    "Upload",
    "CharacterSheet",
    "Notification",
    "NotificationKind",
]
