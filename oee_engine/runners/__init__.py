from .oee_runner import OEECalculatorSession, SessionState, TickResult

__all__ = ["OEECalculatorSession", "SessionState", "TickResult"]
