"""JSON type-rule source.

Loads the ``NodeTypes`` blob (a mapping of type name to rule attributes) from a
JSON file, a JSON string, or an already-decoded mapping.
"""

import json
import logging
from pathlib import Path
from typing import Any, Dict, Mapping, Optional, Union

from pydantic import ValidationError

from schema_forest.errors import TypeRuleSourceError
from schema_forest.typology.base import TypeRule, TypeRuleSource

logger = logging.getLogger(__name__)


class JsonTypeRuleSource(TypeRuleSource):
    """Loads type rules from JSON.

    Exactly one of ``path``, ``text`` or ``data`` must be given.

    Attributes:
        path: File holding the JSON rule table.
        text: JSON rule table as a string.
        data: Decoded rule table.
    """

    def __init__(
        self,
        path: Optional[Union[str, Path]] = None,
        text: Optional[str] = None,
        data: Optional[Mapping[str, Any]] = None,
    ) -> None:
        """Initialize the JSON rule source.

        Raises:
            ValueError: If not exactly one of path, text or data is provided.
        """
        given = [value for value in (path, text, data) if value is not None]
        if len(given) != 1:
            raise ValueError("Exactly one of path, text or data must be provided")

        self.path = Path(path) if path is not None else None
        self.text = text
        self.data = data

    def fetch_rules(self) -> Dict[str, TypeRule]:
        """Read and validate the rule table.

        Returns:
            Mapping of type name to TypeRule, in table order.

        Raises:
            TypeRuleSourceError: If the JSON is unreadable, is not an object, or a
                rule fails validation.
        """
        raw = self._load_raw()
        if not isinstance(raw, Mapping):
            raise TypeRuleSourceError(
                f"Type table must be a JSON object, got {type(raw).__name__}"
            )

        rules: Dict[str, TypeRule] = {}
        for name, attributes in raw.items():
            try:
                rules[name] = TypeRule.model_validate(attributes)
            except ValidationError as e:
                raise TypeRuleSourceError(f"Invalid rule for node type '{name}': {e}") from e

        logger.debug("Loaded %d node types from %s", len(rules), self._describe())
        return rules

    def _load_raw(self) -> Any:
        if self.data is not None:
            return self.data

        if self.path is not None:
            try:
                text = self.path.read_text(encoding="utf-8")
            except OSError as e:
                raise TypeRuleSourceError(f"Could not read node types from {self.path}: {e}") from e
        else:
            text = self.text

        try:
            return json.loads(text)
        except json.JSONDecodeError as e:
            raise TypeRuleSourceError(f"Could not parse node types from {self._describe()}: {e}") from e

    def _describe(self) -> str:
        if self.path is not None:
            return str(self.path)
        return "inline JSON" if self.text is not None else "mapping"
