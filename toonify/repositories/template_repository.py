from __future__ import annotations
import threading
from typing import Dict, List, Optional

from ..models.template_style import Template


class TemplateRepository:
    """
    In-memory template registry.

    Created by the caller and handed to whoever needs it; every access goes
    through one lock, so request threads can share a single instance.
    """

    def __init__(self) -> None:
        self._lock = threading.RLock()
        self._templates: Dict[str, Template] = {}

    def add(self, template: Template) -> Template:
        with self._lock:
            if template.id in self._templates:
                raise KeyError(f"Template already registered: {template.id}")
            self._templates[template.id] = template
        return template

    def get(self, template_id: str) -> Optional[Template]:
        with self._lock:
            return self._templates.get(template_id)

    def list(self) -> List[Template]:
        """Templates in registration order."""
        with self._lock:
            return list(self._templates.values())

    def delete(self, template_id: str) -> bool:
        with self._lock:
            return self._templates.pop(template_id, None) is not None

    def __len__(self) -> int:
        with self._lock:
            return len(self._templates)
