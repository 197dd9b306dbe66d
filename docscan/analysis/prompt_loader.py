import json
from pathlib import Path

from docscan.analysis.exceptions import AnalysisFailureError
from docscan.schema.models import DocumentSchema, FieldDescriptor, FieldKind
from docscan.schema.registry import TYPE_FIELD, all_schemas

_DEFAULT_PROMPT_DIR = Path(__file__).parent / "prompts"


def load_prompt(name: str, prompt_dir: Path | None = None) -> str:
    """Load a prompt template by name.

    Args:
        name: File stem inside the prompt directory, e.g. "analysis_system".
        prompt_dir: Directory holding ``{name}.txt``. Defaults to the bundled prompts.

    Returns:
        The raw template string with placeholders.

    Raises:
        AnalysisFailureError: if the file cannot be read.
    """
    path = (prompt_dir or _DEFAULT_PROMPT_DIR) / f"{name}.txt"
    try:
        return path.read_text(encoding="utf-8")
    except OSError as exc:
        raise AnalysisFailureError(f"Failed to load prompt template {path}: {exc}") from exc


def render_document_shapes(schemas: list[DocumentSchema] | None = None) -> str:
    """Describe each document type's expected ``data`` shape as example JSON."""
    blocks = []
    for schema in schemas if schemas is not None else all_schemas():
        shape: dict[str, object] = {TYPE_FIELD: schema.label}
        for descriptor in schema.fields:
            shape[descriptor.name] = _example_value(descriptor)
        blocks.append(f'"{schema.tag}":\n{json.dumps(shape, indent=2)}')
    return "\n\n".join(blocks)


def _example_value(descriptor: FieldDescriptor) -> object:
    if descriptor.kind is FieldKind.NESTED_OBJECT:
        return {sub.name: _example_value(sub) for sub in descriptor.fields}
    if descriptor.kind is FieldKind.ARRAY_OF_OBJECT:
        return [{sub.name: _example_value(sub) for sub in descriptor.fields}]
    if descriptor.kind is FieldKind.ARRAY_OF_SCALAR:
        return ["..."]
    return "..."
