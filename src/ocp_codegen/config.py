"""Options that shape a generation run."""

from pydantic import BaseModel


class GeneratorOptions(BaseModel):
    """Knobs exposed on the command line.

    package_name overrides the Python package derived from meta.name.
    prune deletes files left over from a previous run of a different schema.
    """

    package_name: str | None = None
    prune: bool = False
