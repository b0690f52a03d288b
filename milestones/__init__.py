from .reconciler import AwardReconciler
from .repository import MilestoneRepository
from database import get_pool


async def setup_milestones():
    pool = await get_pool()
    repo = MilestoneRepository(pool)

    return AwardReconciler(backend=repo)
