"""Pydantic models for Merkle proofs and delta proofs.

Proofs are immutable value records once returned.  Python attributes are
snake_case; the wire form (``by_alias=True``) uses camelCase names
(``oldRoot``, ``newValue`` ...) and validation accepts either spelling.

``siblings`` is always ordered bottom-up: ``siblings[0]`` is the leaf's
sibling, ``siblings[-1]`` is the sibling of the root's child.  Verification
is order-sensitive.
"""

from __future__ import annotations

import json
from pathlib import Path

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

SCHEMA_VERSION = "1.0"

_PROOF_CONFIG = ConfigDict(
    frozen=True,
    populate_by_name=True,
    alias_generator=to_camel,
)


# ---------------------------------------------------------------------------
# Single-value proof
# ---------------------------------------------------------------------------


class MerkleProof(BaseModel):
    """Inclusion proof that *value* sits at *index* under *root*."""

    model_config = _PROOF_CONFIG

    root: str = Field(..., description="Hex-encoded root reached after folding all siblings")
    siblings: tuple[str, ...] = Field(
        ..., description="Hex-encoded sibling nodes from leaf to root"
    )
    index: int = Field(..., ge=-1, description="Leaf index; -1 only for an empty append-only tree")
    value: str = Field(..., description="Hex-encoded leaf value")


# ---------------------------------------------------------------------------
# Delta proof
# ---------------------------------------------------------------------------


class DeltaMerkleProof(BaseModel):
    """Proof that one leaf changed and the root moved from old_root to new_root.

    One siblings tuple is shared between the implicit old and new proofs;
    that sharing is what certifies no other leaf changed.
    """

    model_config = _PROOF_CONFIG

    index: int = Field(..., ge=0)
    siblings: tuple[str, ...] = Field(
        ..., description="Hex-encoded sibling nodes from leaf to root"
    )
    old_root: str
    old_value: str
    new_root: str
    new_value: str

    def old_proof(self) -> MerkleProof:
        return MerkleProof(
            root=self.old_root,
            siblings=self.siblings,
            index=self.index,
            value=self.old_value,
        )

    def new_proof(self) -> MerkleProof:
        return MerkleProof(
            root=self.new_root,
            siblings=self.siblings,
            index=self.index,
            value=self.new_value,
        )


# Models whose wire form external verifiers need to validate.
_EXPORTED_MODELS: tuple[type[BaseModel], ...] = (MerkleProof, DeltaMerkleProof)

_JSON_SCHEMA_DIALECT = "https://json-schema.org/draft/2020-12/schema"


def _schema_for(model_cls: type[BaseModel]) -> dict:
    schema = model_cls.model_json_schema(by_alias=True)
    schema["$schema"] = _JSON_SCHEMA_DIALECT
    schema["$id"] = f"urn:zero-merkle:schemas:{model_cls.__name__}:v{SCHEMA_VERSION}"
    return schema


def schema_filename(model_cls: type[BaseModel]) -> str:
    return f"{model_cls.__name__}.v{SCHEMA_VERSION}.schema.json"


def export_json_schemas(output_dir: str | Path | None = None) -> dict[str, dict]:
    """Return the proof JSON Schemas keyed by model name.

    The schemas use the camelCase wire names.  With *output_dir*, each one
    is also saved there under ``schema_filename(model)``, creating the
    directory if needed.
    """
    schemas = {model_cls.__name__: _schema_for(model_cls) for model_cls in _EXPORTED_MODELS}
    if output_dir is None:
        return schemas

    target = Path(output_dir)
    target.mkdir(parents=True, exist_ok=True)
    for model_cls in _EXPORTED_MODELS:
        payload = json.dumps(schemas[model_cls.__name__], indent=2, sort_keys=True)
        (target / schema_filename(model_cls)).write_text(payload + "\n", encoding="utf-8")
    return schemas
