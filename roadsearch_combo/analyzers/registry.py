"""RoadSearch Analysis Registry - Named Analyzer Resolution.

Builds every analyzer an index knows about: the built-in analyzers plus
the ones declared in the index's analysis settings, e.g.::

    {"index": {"analysis": {
        "filter": {"my_stop": {"type": "stop", "stopwords": ["the"]}},
        "analyzer": {
            "folded": {"type": "custom", "tokenizer": "standard",
                       "filter": ["lowercase", "asciifolding"]},
            "multi": {"type": "combo",
                      "sub_analyzers": ["standard", "folded"]}}}}}

Analyzer types other than ``custom`` and the built-in names are contributed
through :func:`register_analyzer_type`.

Copyright (c) 2024-2026 BlackRoad OS, Inc. All rights reserved.
"""

from __future__ import annotations

import logging
import re
import threading
from typing import Any, Callable, Dict, List, Mapping, Optional, Union

from roadsearch_combo.analyzers.base import (
    Analyzer,
    CharacterFilter,
    HTMLCharacterFilter,
    MappingCharacterFilter,
    PatternReplaceCharacterFilter,
    TokenFilter,
    Tokenizer,
)
from roadsearch_combo.analyzers.filters import STOPWORDS, get_filter_type
from roadsearch_combo.analyzers.standard import (
    BUILTIN_ANALYZERS,
    CustomAnalyzer,
    StandardAnalyzer,
    StopAnalyzer,
    get_builtin_analyzer,
)
from roadsearch_combo.analyzers.tokenizers import get_tokenizer_type
from roadsearch_combo.settings import AnalysisConfigurationError, Settings

logger = logging.getLogger(__name__)

# type name -> provider(name, settings, registry)
AnalyzerProvider = Callable[[str, Settings, "AnalysisRegistry"], Analyzer]
ANALYZER_TYPES: Dict[str, AnalyzerProvider] = {}


def register_analyzer_type(type_name: str) -> Callable[[AnalyzerProvider], AnalyzerProvider]:
    """Decorator registering a provider for an analyzer ``type``.

    Args:
        type_name: Value of the ``type`` key in analyzer settings

    Returns:
        Decorator function
    """
    def decorator(provider: AnalyzerProvider) -> AnalyzerProvider:
        ANALYZER_TYPES[type_name] = provider
        return provider
    return decorator


def _stopwords(settings: Settings) -> Optional[List[str]]:
    """Read ``stopwords``: a list, or a predefined set such as "_english_"."""
    value = settings.get("stopwords")
    if isinstance(value, str) and value.startswith("_") and value.endswith("_"):
        language = value.strip("_")
        if language == "none":
            return []
        if language not in STOPWORDS:
            raise AnalysisConfigurationError(f"Unknown stopword set [{value}]")
        return sorted(STOPWORDS[language])
    return settings.get_as_list("stopwords")


def _rules(lines: List[str]) -> Dict[str, List[str]]:
    """Parse "a, b" (equivalent) and "a, b => c" (explicit) rules."""
    mapping: Dict[str, List[str]] = {}
    for line in lines:
        if "=>" in line:
            left, right = line.split("=>", 1)
            targets = [t.strip() for t in right.split(",") if t.strip()]
            for source in left.split(","):
                if source.strip():
                    mapping.setdefault(source.strip(), []).extend(targets)
        else:
            terms = [t.strip() for t in line.split(",") if t.strip()]
            for term in terms:
                mapping.setdefault(term, []).extend(t for t in terms if t != term)
    return mapping


def _tokenizer_kwargs(type_name: str, settings: Settings) -> Dict[str, Any]:
    if type_name == "standard":
        return {"max_token_length": settings.get_as_int("max_token_length", 255)}
    if type_name == "pattern":
        kwargs: Dict[str, Any] = {
            "pattern": settings.get_as_str("pattern", r"\W+"),
            "group": settings.get_as_int("group", -1),
        }
        if settings.get_as_str("flags", "").upper() == "CASE_INSENSITIVE":
            kwargs["flags"] = re.IGNORECASE
        return kwargs
    return {}


def _filter_kwargs(type_name: str, settings: Settings) -> Dict[str, Any]:
    if type_name == "stop":
        return {
            "stopwords": _stopwords(settings),
            "ignore_case": settings.get_as_bool("ignore_case", True),
        }
    if type_name == "stemmer":
        return {"language": settings.get_as_str("language", settings.get_as_str("name", "english"))}
    if type_name == "synonym":
        return {
            "synonyms": _rules(settings.get_as_list("synonyms") or []),
            "expand": settings.get_as_bool("expand", True),
            "ignore_case": settings.get_as_bool("ignore_case", True),
        }
    if type_name == "asciifolding":
        return {"preserve_original": settings.get_as_bool("preserve_original", False)}
    if type_name == "length":
        return {
            "min_length": settings.get_as_int("min", 0),
            "max_length": settings.get_as_int("max", 255),
        }
    if type_name == "unique":
        return {"only_on_same_position": settings.get_as_bool("only_on_same_position", False)}
    return {}


def _build_char_filter(type_name: str, settings: Settings) -> Optional[CharacterFilter]:
    if type_name == "html_strip":
        return HTMLCharacterFilter(escaped=settings.get_as_bool("escaped", False))
    if type_name == "mapping":
        mappings = {}
        for source, targets in _rules(settings.get_as_list("mappings") or []).items():
            mappings[source] = targets[0] if targets else ""
        return MappingCharacterFilter(mappings)
    if type_name == "pattern_replace":
        return PatternReplaceCharacterFilter(
            settings.get_as_str("pattern", ""),
            settings.get_as_str("replacement", ""),
        )
    return None


class AnalysisRegistry:
    """All analyzers of one index, by name.

    Analyzers are built once, in declaration order; a declared analyzer
    shadows a built-in analyzer of the same name.
    """

    def __init__(self, settings: Union[Settings, Mapping[str, Any], None] = None):
        """Initialize registry.

        Args:
            settings: Index settings (with or without the ``index.`` wrapper)

        Raises:
            AnalysisConfigurationError: If an analyzer definition is invalid
        """
        # The combo package contributes the "combo" analyzer type.
        from roadsearch_combo import combo  # noqa: F401

        if not isinstance(settings, Settings):
            settings = Settings(settings)
        self.settings = settings
        analysis = settings.analysis()
        self._tokenizer_settings = analysis.get_groups("tokenizer")
        self._filter_settings = analysis.get_groups("filter")
        self._char_filter_settings = analysis.get_groups("char_filter")

        self._lock = threading.RLock()
        self._analyzers: Dict[str, Analyzer] = {}
        self._types: Dict[str, str] = {}

        for name in BUILTIN_ANALYZERS:
            self._analyzers[name] = get_builtin_analyzer(name)
            self._types[name] = name

        declared = analysis.get_groups("analyzer")
        for name, group in declared.items():
            type_name = group.get_as_str("type", "custom")
            self._analyzers[name] = self._build_analyzer(name, type_name, group)
            self._types[name] = type_name

        logger.info(
            f"Analysis registry built: {len(declared)} declared, "
            f"{len(self._analyzers)} total analyzers"
        )

    def _build_analyzer(self, name: str, type_name: str, settings: Settings) -> Analyzer:
        provider = ANALYZER_TYPES.get(type_name)
        if provider is not None:
            return provider(name, settings, self)
        if type_name == "custom":
            return self._build_custom(name, settings)
        if type_name == "standard":
            return StandardAnalyzer(
                stopwords=_stopwords(settings),
                max_token_length=settings.get_as_int("max_token_length", 255),
            )
        if type_name == "stop":
            return StopAnalyzer(stopwords=_stopwords(settings))
        analyzer = get_builtin_analyzer(type_name)
        if analyzer is None:
            raise AnalysisConfigurationError(
                f"Unknown analyzer type [{type_name}] for analyzer [{name}]"
            )
        return analyzer

    def _build_custom(self, name: str, settings: Settings) -> Analyzer:
        tokenizer_name = settings.get_as_str("tokenizer")
        if tokenizer_name is None:
            raise AnalysisConfigurationError(
                f"Custom analyzer [{name}] must be configured with a tokenizer"
            )
        return CustomAnalyzer(
            tokenizer=self.get_tokenizer(tokenizer_name),
            char_filters=[self.get_char_filter(n) for n in settings.get_as_list("char_filter") or []],
            token_filters=[self.get_token_filter(n) for n in settings.get_as_list("filter") or []],
        )

    def get_tokenizer(self, name: str) -> Tokenizer:
        """Build a tokenizer declared in settings or a built-in one."""
        settings = self._tokenizer_settings.get(name, Settings({"type": name}))
        type_name = settings.get_as_str("type", name)
        cls = get_tokenizer_type(type_name)
        if cls is None:
            raise AnalysisConfigurationError(f"Unknown tokenizer [{name}] of type [{type_name}]")
        return cls(**_tokenizer_kwargs(type_name, settings))

    def get_token_filter(self, name: str) -> TokenFilter:
        """Build a token filter declared in settings or a built-in one."""
        settings = self._filter_settings.get(name, Settings({"type": name}))
        type_name = settings.get_as_str("type", name)
        cls = get_filter_type(type_name)
        if cls is None:
            raise AnalysisConfigurationError(f"Unknown token filter [{name}] of type [{type_name}]")
        return cls(**_filter_kwargs(type_name, settings))

    def get_char_filter(self, name: str) -> CharacterFilter:
        """Build a char filter declared in settings or a built-in one."""
        settings = self._char_filter_settings.get(name, Settings({"type": name}))
        type_name = settings.get_as_str("type", name)
        char_filter = _build_char_filter(type_name, settings)
        if char_filter is None:
            raise AnalysisConfigurationError(f"Unknown char filter [{name}] of type [{type_name}]")
        return char_filter

    def register(self, name: str, analyzer: Analyzer, analyzer_type: str = "custom") -> None:
        """Register an already built analyzer under ``name``."""
        with self._lock:
            self._analyzers[name] = analyzer
            self._types[name] = analyzer_type

    def get(self, name: str, include_combo: bool = True) -> Optional[Analyzer]:
        """Get analyzer by name.

        Args:
            name: Analyzer name
            include_combo: Whether combo analyzers may be returned

        Returns:
            Analyzer or None
        """
        with self._lock:
            analyzer = self._analyzers.get(name)
            if analyzer is None:
                return None
            if not include_combo and self._types.get(name) == "combo":
                return None
            return analyzer

    def get_type(self, name: str) -> Optional[str]:
        with self._lock:
            return self._types.get(name)

    def list_analyzers(self) -> List[str]:
        """List registered analyzer names."""
        with self._lock:
            return list(self._analyzers)

    def analyze(self, analyzer: str, text: str) -> List[Dict[str, Any]]:
        """Analyze ``text`` and describe the resulting tokens.

        Args:
            analyzer: Analyzer name
            text: Input text

        Returns:
            One dict per token with token, offsets, type and position
        """
        instance = self.get(analyzer)
        if instance is None:
            raise AnalysisConfigurationError(f"Failed to find analyzer [{analyzer}]")
        return [token.to_dict() for token in instance.analyze(text)]

    def close(self) -> None:
        """Close every analyzer."""
        with self._lock:
            for analyzer in self._analyzers.values():
                analyzer.close()


__all__ = [
    "ANALYZER_TYPES",
    "AnalysisRegistry",
    "AnalyzerProvider",
    "register_analyzer_type",
]
