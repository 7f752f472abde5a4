"""Coach package exposing the offline chat responder."""

from .prompt_loader import CoachScript, load_script
from .responder import CoachMessageRequest, CoachReply, CoachResponder

__all__ = ["CoachMessageRequest", "CoachReply", "CoachResponder", "CoachScript", "load_script"]
