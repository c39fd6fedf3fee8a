from .base import Check, CheckKind, Rule

__all__ = ["Check", "CheckKind", "Rule"]
