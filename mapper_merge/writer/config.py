"""
Configuration for writing generated files.

Mirrors the dataclass-with-from_dict layout of the generator config so the
same JSON config file can drive both.
"""

from __future__ import annotations

from dataclasses import dataclass


@dataclass
class WriterConfig:
    """Configuration options for reconciling and writing mapper files."""

    # Encoding announced in the XML declaration and used to write files
    encoding: str = "UTF-8"

    # Indentation unit for statements inside the mapper root
    indent: str = "  "

    # Attribute that identifies a statement within a mapper
    id_attribute: str = "id"

    # Write through a temporary file that replaces the target
    atomic_write: bool = True

    @staticmethod
    def from_dict(d: dict) -> WriterConfig:
        """Create a config from a dictionary."""
        config = WriterConfig()
        for k, v in d.items():
            if hasattr(config, k):
                setattr(config, k, v)
        return config

    def to_dict(self) -> dict:
        """Convert config to a dictionary."""
        return {
            "encoding": self.encoding,
            "indent": self.indent,
            "id_attribute": self.id_attribute,
            "atomic_write": self.atomic_write,
        }
