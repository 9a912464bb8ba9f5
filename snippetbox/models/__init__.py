from snippetbox.models.snippet import Snippet

__all__ = ["Snippet"]
