from .scheduler import SchedulerManager, get_scheduler_manager, register_jobs

__all__ = ["SchedulerManager", "get_scheduler_manager", "register_jobs"]
