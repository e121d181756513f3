from .dao import TemplateStore

__all__ = ["TemplateStore"]
