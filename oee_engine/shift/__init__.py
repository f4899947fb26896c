from .shift_scheduler import ShiftState, compute_shift_state

__all__ = ["ShiftState", "compute_shift_state"]
