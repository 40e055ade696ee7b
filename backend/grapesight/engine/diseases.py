"""Static disease metadata, keyed by the classifier's closed set of class names."""

from __future__ import annotations

import enum
from types import MappingProxyType

from grapesight.errors import UnknownDiseaseClass
from grapesight.models.results import DiseaseInfo


class DiseaseClass(str, enum.Enum):
    BLACK_ROT = "Black Rot"
    ESCA = "ESCA (Black measles)"
    HEALTHY = "Healthy"
    LEAF_BLIGHT = "Leaf Blight"


DISEASE_TABLE: MappingProxyType[DiseaseClass, DiseaseInfo] = MappingProxyType({
    DiseaseClass.BLACK_ROT: DiseaseInfo(
        emoji="🔴",
        description="Black rot - a serious fungal disease that causes circular brown spots on the leaves.",
        severity="High",
        treatment="Copper fungicides, pruning of affected parts, improved ventilation",
    ),
    DiseaseClass.ESCA: DiseaseInfo(
        emoji="🟤",
        description="ESCA - a fungal complex that causes measles-like spots on the leaves.",
        severity="Very High",
        treatment="No definitive cure; preventive management with systemic fungicides",
    ),
    DiseaseClass.HEALTHY: DiseaseInfo(
        emoji="🟢",
        description="Healthy leaf - no detectable signs of disease.",
        severity="None",
        treatment="Continue with preventive management practices",
    ),
    DiseaseClass.LEAF_BLIGHT: DiseaseInfo(
        emoji="🟡",
        description="Leaf blight - a disease that causes necrotic spots and yellowing.",
        severity="Medium",
        treatment="Preventive fungicides, improved drainage, avoid foliar irrigation",
    ),
})

_missing = set(DiseaseClass) - set(DISEASE_TABLE)
if _missing:
    raise RuntimeError(f"Disease table has no entry for: {sorted(m.value for m in _missing)}")


def parse_disease_class(name: str) -> DiseaseClass:
    try:
        return DiseaseClass(name)
    except ValueError:
        raise UnknownDiseaseClass(name) from None


def disease_info_for(name: str) -> DiseaseInfo:
    """Look up metadata for a class name. Raises ``UnknownDiseaseClass``."""
    return DISEASE_TABLE[parse_disease_class(name)]
