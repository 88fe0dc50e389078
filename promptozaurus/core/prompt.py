"""
PromptBlock — A template plus the context selected for it.
"""

from dataclasses import dataclass, field
from typing import Any, Dict, Optional

from .model import require_id, require_mapping, require_text
from .selection import SelectionSet


@dataclass
class PromptBlock:
    """
    A prompt template and its Selection Set.

    The template may contain a context placeholder ({{context}}) that the
    compiler replaces with the selected context text.
    """
    id: int
    title: str = ""
    template: str = ""
    template_filename: Optional[str] = None
    selection: SelectionSet = field(default_factory=SelectionSet)

    def __post_init__(self):
        require_id(self.id)
        require_text(self.title, "title")
        require_text(self.template, "template")

    def set_template(self, template: str, filename: Optional[str] = None):
        self.template = require_text(template, "template")
        if filename is not None:
            self.template_filename = filename

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "title": self.title,
            "template": self.template,
            "templateFilename": self.template_filename,
            "selectedContexts": self.selection.contexts_to_dict(),
            "selectionOrder": self.selection.order_to_wire(),
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'PromptBlock':
        require_mapping(data, "prompt block")
        return cls(
            id=data.get("id"),
            title=data.get("title") or "",
            template=data.get("template") or "",
            template_filename=data.get("templateFilename"),
            selection=SelectionSet.from_dict(
                data.get("selectedContexts"), data.get("selectionOrder")
            ),
        )
