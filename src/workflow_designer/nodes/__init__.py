"""Node type registry and the built-in step kinds."""

from workflow_designer.nodes.builtin import (
    API_NODE_TYPE,
    CONDITION_NODE_TYPE,
    END_NODE_TYPE,
    START_NODE_TYPE,
    create_default_registry,
    register_builtin_node_types,
)
from workflow_designer.nodes.registry import (
    UNKNOWN_NODE_TYPE,
    NodeTypeDescriptor,
    NodeTypeRegistry,
    PaletteEntry,
    PropertySpec,
)

__all__ = [
    "API_NODE_TYPE",
    "CONDITION_NODE_TYPE",
    "END_NODE_TYPE",
    "START_NODE_TYPE",
    "UNKNOWN_NODE_TYPE",
    "NodeTypeDescriptor",
    "NodeTypeRegistry",
    "PaletteEntry",
    "PropertySpec",
    "create_default_registry",
    "register_builtin_node_types",
]
