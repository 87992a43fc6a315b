from app.services.email.postmark import postmark_service
from app.services.playback_gate import GateState, PlaybackGate, PlaybackGateError
from app.services.stripe_service import stripe_service

__all__ = [
    "GateState",
    "PlaybackGate",
    "PlaybackGateError",
    "postmark_service",
    "stripe_service",
]
