"""Markup-driven view construction for Luvatrix."""

from .bindings import Binding, BindingRegistry, default_binding_registry
from .builder import ViewBuilder, build
from .config import MarkupConfig, load_markup_config, validate_color_table
from .document import Document, Element, ProcessingInstruction, load_document, parse_document
from .errors import (
    BindingPathError,
    DecodeError,
    IncludeCycleError,
    MarkupError,
    ParseSyntaxError,
    ResourceNotFoundError,
    RootTypeMismatchError,
    TooManyChildrenError,
    UnexpectedTextError,
    UnknownElementError,
    UnknownOutletError,
    UnknownPropertyError,
    UnsupportedInstructionError,
)
from .properties import PropertySpec, apply_property, prop, property_table
from .registry import AppendPolicy, Capabilities, ComponentRegistry, ComponentType, default_registry
from .resources import DirectoryResourceLoader, MappingResourceLoader, ResourceLoader
from .values import Color, Font, FontDescriptor, ValueDecoder, parse_color, parse_font

__all__ = [
    "AppendPolicy",
    "Binding",
    "BindingPathError",
    "BindingRegistry",
    "Capabilities",
    "Color",
    "ComponentRegistry",
    "ComponentType",
    "DecodeError",
    "DirectoryResourceLoader",
    "Document",
    "Element",
    "Font",
    "FontDescriptor",
    "IncludeCycleError",
    "MappingResourceLoader",
    "MarkupConfig",
    "MarkupError",
    "ParseSyntaxError",
    "ProcessingInstruction",
    "PropertySpec",
    "ResourceLoader",
    "ResourceNotFoundError",
    "RootTypeMismatchError",
    "TooManyChildrenError",
    "UnexpectedTextError",
    "UnknownElementError",
    "UnknownOutletError",
    "UnknownPropertyError",
    "UnsupportedInstructionError",
    "ValueDecoder",
    "ViewBuilder",
    "apply_property",
    "build",
    "default_binding_registry",
    "default_registry",
    "load_document",
    "load_markup_config",
    "parse_color",
    "parse_document",
    "parse_font",
    "prop",
    "property_table",
    "validate_color_table",
]
