from .detector import CelebrationDetector, TIER_UP, LEVEL_UP
from .queue import CelebrationQueue, queue_consumer
