# pharmalink/models.py
"""
Validated shapes of everything the gateway reads from its collaborators.

Envelopes (mapping, pharmacology, SPARQL results) are validated up front and
a mismatch is an UpstreamError. Individual pharmacology items are validated
lazily: an item without the nested identifier we need is skipped.
"""
from __future__ import annotations

import logging
from typing import Any, Iterable, List, Optional, Tuple, Type, TypeVar

from pydantic import BaseModel, ConfigDict, Field, ValidationError

from .errors import UpstreamError

log = logging.getLogger("pharmalink.models")

M = TypeVar("M", bound=BaseModel)

# ------------------------------------------------------------------------------
# Triples (SPARQL JSON results)
# ------------------------------------------------------------------------------

class RdfTerm(BaseModel):
    # datatype, xml:lang etc. are carried through untouched
    model_config = ConfigDict(extra="allow")

    type: Optional[str] = None
    value: str


class Triple(BaseModel):
    s: RdfTerm
    p: RdfTerm
    o: RdfTerm

    @property
    def key(self) -> Tuple[str, str, str]:
        return (self.s.value, self.p.value, self.o.value)

    def to_binding(self) -> dict:
        return self.model_dump(exclude_none=True)


class _Bindings(BaseModel):
    bindings: List[Triple]


class SparqlResponse(BaseModel):
    results: _Bindings

# ------------------------------------------------------------------------------
# Open PHACTS envelopes
# ------------------------------------------------------------------------------

class _PrimaryTopic(BaseModel):
    exactMatch: List[Any]


class _MappingResult(BaseModel):
    primaryTopic: _PrimaryTopic


class MappingResponse(BaseModel):
    result: _MappingResult

    def candidates(self) -> List[str]:
        return [m for m in self.result.primaryTopic.exactMatch if isinstance(m, str)]


class _ItemsResult(BaseModel):
    items: List[Any]


class PharmacologyResponse(BaseModel):
    result: _ItemsResult

    @property
    def items(self) -> List[Any]:
        return self.result.items

# ------------------------------------------------------------------------------
# Pharmacology items
# ------------------------------------------------------------------------------

class _About(BaseModel):
    about: str = Field(alias="_about")


class MoleculeItem(BaseModel):
    """target/pharmacology item: the molecule is at hasMolecule._about"""
    hasMolecule: _About


class _Assay(BaseModel):
    hasTarget: _About


class AssayTargetItem(BaseModel):
    """compound/pharmacology item: the target is at hasAssay.hasTarget._about"""
    hasAssay: _Assay


def parse_entries(items: Iterable[Any], model: Type[M]) -> List[M]:
    out: List[M] = []
    skipped = 0
    for item in items:
        try:
            out.append(model.model_validate(item))
        except ValidationError:
            skipped += 1
    if skipped:
        log.debug("Skipped %d %s entries without the expected fields", skipped, model.__name__)
    return out


def molecule_ids(items: Iterable[Any]) -> List[str]:
    return [e.hasMolecule.about for e in parse_entries(items, MoleculeItem)]


def assay_target_ids(items: Iterable[Any]) -> List[str]:
    return [e.hasAssay.hasTarget.about for e in parse_entries(items, AssayTargetItem)]

# ------------------------------------------------------------------------------
# Envelope validation
# ------------------------------------------------------------------------------

def parse_envelope(model: Type[M], payload: Any, *, source: str, message: str) -> M:
    """Validate a collaborator response; an `error` key or a shape mismatch is fatal."""
    if isinstance(payload, dict) and "error" in payload:
        raise UpstreamError(source, payload["error"])
    try:
        return model.model_validate(payload)
    except ValidationError as e:
        raise UpstreamError(source, f"{message}\n{e}") from e
