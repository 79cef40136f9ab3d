from .logger import (
    clear_unit_of_work_id,
    get_logger,
    get_unit_of_work_id,
    log_stage,
    set_unit_of_work_id,
    setup_logging,
)

__all__ = [
    "clear_unit_of_work_id",
    "get_logger",
    "get_unit_of_work_id",
    "log_stage",
    "set_unit_of_work_id",
    "setup_logging",
]
