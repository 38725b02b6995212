"""Edit non-overlapping ranges on a circular value space."""

from .models.editor import RingEditor, SelectedEndpoint, Thumb
from .models.value_space import ValueSpace
from .utils.config import EditorConfig

__version__ = "0.1.0"

__all__ = ["RingEditor", "SelectedEndpoint", "Thumb", "ValueSpace", "EditorConfig"]
