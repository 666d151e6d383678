from .engine import ARCHITECTURE_STEPS, generate_architecture

__all__ = ["ARCHITECTURE_STEPS", "generate_architecture"]
