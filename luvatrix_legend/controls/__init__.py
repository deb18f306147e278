from .button import ButtonModel, ButtonState
from .interaction import InteractionEvent, InteractionType, parse_interaction_event

__all__ = ["ButtonModel", "ButtonState", "InteractionEvent", "InteractionType", "parse_interaction_event"]
