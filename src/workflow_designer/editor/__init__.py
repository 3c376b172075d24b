"""Property editor for the selected canvas node."""

from workflow_designer.editor.property_editor import (
    EMPTY_STATE_MESSAGE,
    PropertyEditor,
    PropertyField,
    PropertyForm,
)

__all__ = ["EMPTY_STATE_MESSAGE", "PropertyEditor", "PropertyField", "PropertyForm"]
