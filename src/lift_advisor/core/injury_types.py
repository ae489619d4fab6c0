"""
Named injury types.

A user usually knows "I have tennis elbow", not "elbow, severity 2".  Each
InjuryType maps a named condition to the body area the risk classifier
understands and to a default severity, so it can be turned into an
InjuryContext in one call.
"""

from dataclasses import dataclass
from typing import Final

from .models import InjuryContext, Side

SEVERITY_LEVELS: Final[dict[str, int]] = {"mild": 1, "moderate": 2, "severe": 3}

# Areas that accept a _left / _right suffix
LATERAL_AREAS: Final[frozenset[str]] = frozenset(
    {"shoulder", "knee", "hip", "elbow", "wrist", "ankle"}
)


@dataclass(frozen=True)
class InjuryType:
    type_id: str
    name: str
    description: str
    area: str  # generic InjuryContext area
    affected_muscles: tuple[str, ...]
    default_severity: str  # mild | moderate | severe

    @property
    def severity_level(self) -> int:
        return SEVERITY_LEVELS[self.default_severity]


INJURY_TYPES: Final[tuple[InjuryType, ...]] = (
    # Back
    InjuryType("lower_back_strain", "Lower Back Strain/Pull",
               "Muscle strain in the lower back (lumbar) region",
               "lower_back", ("back",), "moderate"),
    InjuryType("herniated_disc", "Herniated/Bulging Disc",
               "Disc herniation in the spine",
               "lower_back", ("back",), "severe"),
    InjuryType("sciatica", "Sciatica",
               "Pain radiating along the sciatic nerve",
               "lower_back", ("back", "glutes", "hamstrings"), "moderate"),
    InjuryType("upper_back_strain", "Upper Back Strain",
               "Muscle strain in the thoracic (upper back) region",
               "upper_back", ("back",), "mild"),
    # Shoulder
    InjuryType("shoulder_impingement", "Shoulder Impingement",
               "Pinching of rotator cuff tendons in the shoulder",
               "shoulder", ("shoulders",), "moderate"),
    InjuryType("rotator_cuff_strain", "Rotator Cuff Strain",
               "Strain or tear of rotator cuff muscles",
               "shoulder", ("shoulders",), "moderate"),
    InjuryType("shoulder_instability", "Shoulder Instability/Dislocation History",
               "History of shoulder dislocations or subluxations",
               "shoulder", ("shoulders",), "moderate"),
    # Knee
    InjuryType("knee_injury", "Knee Injury (General)",
               "General knee pain or injury",
               "knee", ("quads", "hamstrings"), "moderate"),
    InjuryType("patellofemoral", "Patellofemoral Syndrome",
               "Pain behind or around the kneecap",
               "knee", ("quads",), "mild"),
    InjuryType("meniscus_tear", "Meniscus Tear/Injury",
               "Damage to the meniscus cartilage",
               "knee", ("quads", "hamstrings"), "moderate"),
    InjuryType("acl_injury", "ACL Injury/Surgery",
               "Anterior cruciate ligament injury or post-surgery",
               "knee", ("quads", "hamstrings"), "severe"),
    # Arms
    InjuryType("elbow_tendinitis", "Elbow Tendinitis (Tennis/Golfers Elbow)",
               "Tendinitis on outer or inner elbow",
               "elbow", ("biceps", "triceps"), "moderate"),
    InjuryType("wrist_strain", "Wrist Strain",
               "Strain or pain in the wrist",
               "wrist", (), "mild"),
    InjuryType("carpal_tunnel", "Carpal Tunnel Syndrome",
               "Nerve compression in the wrist",
               "wrist", (), "moderate"),
    # Hip
    InjuryType("hip_flexor_strain", "Hip Flexor Strain",
               "Strain of the hip flexor muscles",
               "hip", ("quads", "glutes"), "moderate"),
    InjuryType("hip_impingement", "Hip Impingement (FAI)",
               "Femoroacetabular impingement",
               "hip", ("glutes", "quads"), "moderate"),
    InjuryType("hip_bursitis", "Hip Bursitis",
               "Inflammation of the hip bursa",
               "hip", ("glutes",), "moderate"),
    # Neck
    InjuryType("neck_strain", "Neck Strain",
               "Strain or pain in the neck (cervical spine)",
               "neck", (), "moderate"),
    InjuryType("cervical_disc", "Cervical Disc Issue",
               "Disc herniation or degeneration in the neck",
               "neck", (), "severe"),
    # Ankle
    InjuryType("ankle_sprain", "Ankle Sprain",
               "Sprained or rolled ankle",
               "ankle", ("calves",), "moderate"),
)

_BY_ID: Final[dict[str, InjuryType]] = {t.type_id: t for t in INJURY_TYPES}


def get_injury_type(type_id: str) -> InjuryType | None:
    return _BY_ID.get(type_id)


def injury_types_for_area(area: str) -> list[InjuryType]:
    """Injury types on a generic area ("knee_left" counts as "knee")."""
    generic = area.removesuffix("_left").removesuffix("_right")
    return [t for t in INJURY_TYPES if t.area == generic]


def injury_context_for_type(
    type_id: str,
    side: Side | None = None,
    severity: int | None = None,
) -> InjuryContext:
    """
    Build the InjuryContext the risk classifier consumes.

    Args:
        type_id: An INJURY_TYPES id, e.g. "meniscus_tear"
        side: "left"/"right" for lateral areas; ignored for spine and chest
        severity: 1-3; defaults to the type's default severity

    Raises:
        ValueError: Unknown type id, bad side or out-of-range severity
    """
    injury_type = get_injury_type(type_id)
    if injury_type is None:
        raise ValueError(f"Unknown injury type: {type_id!r}")
    area = injury_type.area
    if side is not None:
        if side not in ("left", "right"):
            raise ValueError(f"side must be 'left' or 'right', got {side!r}")
        if area in LATERAL_AREAS:
            area = f"{area}_{side}"
    level = injury_type.severity_level if severity is None else severity
    return InjuryContext(area=area, severity=level)
