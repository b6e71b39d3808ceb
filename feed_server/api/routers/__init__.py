from . import composite, export, posts, scorecard

__all__ = ["composite", "export", "posts", "scorecard"]
