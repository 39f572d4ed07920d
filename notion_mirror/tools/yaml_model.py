"""
Pydantic models persisted as .yaml files.
"""

from pathlib import Path
from typing import Self

import yaml
from pydantic import BaseModel

__all__ = [
    "BaseYamlModel",
]


class BaseYamlModel(BaseModel):
    """
    Base pydantic model which can be loaded from and dumped to a .yaml file.
    """

    @classmethod
    def load_yaml(cls, file: Path) -> Self:
        """
        Load model from .yaml file, raising `ValueError` if the document
        isn't a mapping.
        """
        with file.open(encoding="utf-8") as fh:
            model = yaml.safe_load(fh)

        if not isinstance(model, dict):
            raise ValueError(f"Expected a mapping in '{file}', got: {model!r}")

        return cls.model_validate(model)

    def dump_yaml(self, file: Path):
        model = self.model_dump(mode="json", exclude_defaults=True)
        file.write_text(
            yaml.safe_dump(model, default_flow_style=False, sort_keys=False),
            encoding="utf-8",
        )
