from .openai_assistants import AssistantsClient

__all__ = ["AssistantsClient"]
