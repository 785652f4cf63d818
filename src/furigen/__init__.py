from .jlpt import JlptLevel, build_kanji_skip_set
from .masking import MaskedText, mask_exclusions, restore_placeholders
from .nlp import FugashiTokenizer, NLPBackendUnavailableError, load_tokenizer
from .scopes import DedupScope
from .service import FuriganaService
from .settings import FuriganaSettings, load_settings, save_settings
from .syntax import AnnotationSyntax, remove_furigana
from .tokens import LexicalToken, Tokenizer, TokenizerUnavailableWarning, WordType

__all__ = [
    "FuriganaService",
    "FuriganaSettings",
    "load_settings",
    "save_settings",
    "AnnotationSyntax",
    "DedupScope",
    "JlptLevel",
    "build_kanji_skip_set",
    "MaskedText",
    "mask_exclusions",
    "restore_placeholders",
    "remove_furigana",
    "LexicalToken",
    "Tokenizer",
    "TokenizerUnavailableWarning",
    "WordType",
    "FugashiTokenizer",
    "NLPBackendUnavailableError",
    "load_tokenizer",
]
