from .builder import RegistrationBuilder
from .heartbeat import HeartbeatScheduler, HeartbeatSender

__all__ = ["HeartbeatScheduler", "HeartbeatSender", "RegistrationBuilder"]
