from healthdeck.resources.loader import ResourceLoader

__all__ = ["ResourceLoader"]
