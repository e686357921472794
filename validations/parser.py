import json
from typing import Any, Dict


class RuleDefinitionParser:
    """
    Reads an administrator-authored rule from its JSON text. The document is
    expected to carry workspaceId, name, trigger, conditions and actions.
    """

    def parse(self, text: str) -> Dict[str, Any]:
        """
        Parse rule JSON into a dictionary for validation.

        Raises json.JSONDecodeError if the input is not valid JSON and
        ValueError if the top level is not an object.
        """
        document = json.loads(text)
        if not isinstance(document, dict):
            raise ValueError("Rule definition must be a JSON object")
        return document
