from .loader import PersonaConfig, load_persona

__all__ = ["PersonaConfig", "load_persona"]
