"""
cuetrack - Speech-to-script alignment for teleprompters.

Matches a live, error-prone speech transcript against a known script and
advances a highlight position through it in real time.
"""

__version__ = "0.1.0"

from .fuzzy_matcher import is_fuzzy_match
from .normalizer import is_annotation_word, normalize
from .pages import PageDeck
from .script import Script, ScriptWord, parse_script
from .session import AlignmentSession, ListeningMode, SessionConfig, SessionState
from .threaded_session import ThreadedSession

__all__ = [
    "AlignmentSession",
    "ListeningMode",
    "PageDeck",
    "Script",
    "ScriptWord",
    "SessionConfig",
    "SessionState",
    "ThreadedSession",
    "is_annotation_word",
    "is_fuzzy_match",
    "normalize",
    "parse_script",
]
