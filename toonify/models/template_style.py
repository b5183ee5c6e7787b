from __future__ import annotations
from dataclasses import dataclass
from datetime import datetime


@dataclass(frozen=True)
class ColorSample:
    r: int  # 0-255
    g: int  # 0-255
    b: int  # 0-255

    def as_dict(self) -> dict:
        return {"r": self.r, "g": self.g, "b": self.b}


@dataclass(frozen=True)
class TemplateStyle:
    """
    Color statistics captured once, at template registration.
    """
    dominant_color: ColorSample
    sample_count: int  # Number of pixels averaged, always >= 1

    def as_dict(self) -> dict:
        return {
            "dominant_color": self.dominant_color.as_dict(),
            "sample_count": self.sample_count,
        }


@dataclass(frozen=True)
class Template:
    """
    Registry record for a named template.
    """
    id: str
    name: str
    image_count: int        # Images supplied at registration, decodable or not
    thumbnail_url: str
    style_data: TemplateStyle
    created_at: datetime

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "name": self.name,
            "image_count": self.image_count,
            "thumbnail_url": self.thumbnail_url,
            "style_data": self.style_data.as_dict(),
            "created_at": self.created_at.isoformat(),
        }
