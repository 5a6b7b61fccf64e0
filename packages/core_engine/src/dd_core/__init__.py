from dd_core.canonical import compile_dictionary, dumps_dictionary, write_dictionary
from dd_core.compiler import CompileResult, compile_path, compile_sources, parse_sources
from dd_core.config import CompilerConfig, load_config
from dd_core.errors import (
    ConfigError,
    ContextError,
    DictionaryError,
    DiscoveryError,
    ResolutionError,
    StoreError,
    StreamError,
)
from dd_core.inliner import inline_entities, inline_file
from dd_core.loader import DictionarySources, discover_sources
from dd_core.parser import DictionaryParser, parse_dictionary_files, parse_dictionary_text
from dd_core.resolver import (
    BASE_TYPE_OVERRIDES,
    PRIMITIVE_TYPES,
    TypeResolver,
    resolve_to_base_type,
)
from dd_core.store import EntityStore

__all__ = [
    "BASE_TYPE_OVERRIDES",
    "CompileResult",
    "CompilerConfig",
    "ConfigError",
    "ContextError",
    "DictionaryError",
    "DictionaryParser",
    "DictionarySources",
    "DiscoveryError",
    "EntityStore",
    "PRIMITIVE_TYPES",
    "ResolutionError",
    "StoreError",
    "StreamError",
    "TypeResolver",
    "compile_dictionary",
    "compile_path",
    "compile_sources",
    "discover_sources",
    "dumps_dictionary",
    "inline_entities",
    "inline_file",
    "load_config",
    "parse_dictionary_files",
    "parse_dictionary_text",
    "parse_sources",
    "resolve_to_base_type",
    "write_dictionary",
]
