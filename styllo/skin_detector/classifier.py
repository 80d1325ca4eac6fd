"""
Rule-based skin tone classification in LAB space.

| Tone   | L range      | Notes                         |
|--------|--------------|-------------------------------|
| Fair   | L > 70       |                               |
| Medium | 55 < L <= 70 | also 40 < L <= 55 when not olive |
| Olive  | 40 < L <= 55 | b > 15 and a < 15             |
| Deep   | L <= 40      | any a/b                       |
"""

from typing import Dict, Any

from styllo.core.models import LabColor, SkinTone, Undertone


def classify_skin_tone(lab: LabColor) -> SkinTone:
    if lab.L > 70:
        return SkinTone.FAIR
    if lab.L > 55:
        return SkinTone.MEDIUM
    if lab.L > 40:
        # Olive: little redness, noticeably yellow
        if lab.b > 15 and lab.a < 15:
            return SkinTone.OLIVE
        return SkinTone.MEDIUM
    return SkinTone.DEEP


def get_undertone(lab: LabColor) -> Undertone:
    if lab.a > 12 and lab.b < 18:
        return Undertone.COOL
    if lab.a < 10 and lab.b > 20:
        return Undertone.WARM
    return Undertone.NEUTRAL


def classify_detailed(lab: LabColor) -> Dict[str, Any]:
    return {
        "tone": classify_skin_tone(lab),
        "undertone": get_undertone(lab),
        "lab": lab,
    }
