"""Image metadata output schemas."""

from typing import Any

from pydantic import BaseModel, Field


class ImageSize(BaseModel):
    width: int
    height: int


class ExifData(BaseModel):
    """Typed EXIF fields.

    The raw_metadata field contains every tag the engine could read,
    keyed by its EXIF tag name.
    """

    # Camera
    make: str | None = Field(default=None, description="Camera manufacturer")
    model: str | None = Field(default=None, description="Camera model")
    software: str | None = Field(default=None, description="Software used to create/modify the image")

    # Orientation / resolution
    orientation: int = Field(default=0, description="EXIF orientation (1-8, 0 = absent)")
    x_resolution: float | None = Field(default=None, description="Horizontal resolution")
    y_resolution: float | None = Field(default=None, description="Vertical resolution")
    resolution_unit: int | None = Field(default=None, description="Resolution unit (2=inch, 3=cm)")

    # Date/time
    datetime: str | None = Field(default=None, description="File change date/time")
    datetime_original: str | None = Field(default=None, description="Date/time the photo was taken")
    datetime_digitized: str | None = Field(default=None, description="Date/time the photo was digitized")

    # Exposure
    exposure_time: float | None = Field(default=None, description="Shutter speed in seconds")
    f_number: float | None = Field(default=None, description="F-stop/aperture")
    iso_speed_ratings: int | None = Field(default=None, description="ISO speed")
    focal_length: float | None = Field(default=None, description="Focal length in mm")
    flash: int | None = Field(default=None, description="Flash status bitfield")

    # Dimensions as recorded by the camera
    pixel_x_dimension: int | None = Field(default=None, description="Recorded image width")
    pixel_y_dimension: int | None = Field(default=None, description="Recorded image height")

    raw_metadata: dict[str, Any] = Field(default_factory=dict, description="All readable EXIF tags")

    @classmethod
    def from_raw_metadata(cls, raw_meta: dict[str, Any]) -> "ExifData":
        """Create ExifData from a tag-name keyed dictionary.

        Args:
            raw_meta: EXIF tags keyed by name (e.g. "Make", "Orientation")

        Returns:
            ExifData instance with typed fields populated
        """
        return cls(
            make=_as_str(raw_meta.get("Make")),
            model=_as_str(raw_meta.get("Model")),
            software=_as_str(raw_meta.get("Software")),
            orientation=_as_int(raw_meta.get("Orientation")) or 0,
            x_resolution=_as_float(raw_meta.get("XResolution")),
            y_resolution=_as_float(raw_meta.get("YResolution")),
            resolution_unit=_as_int(raw_meta.get("ResolutionUnit")),
            datetime=_as_str(raw_meta.get("DateTime")),
            datetime_original=_as_str(raw_meta.get("DateTimeOriginal")),
            datetime_digitized=_as_str(raw_meta.get("DateTimeDigitized")),
            exposure_time=_as_float(raw_meta.get("ExposureTime")),
            f_number=_as_float(raw_meta.get("FNumber")),
            iso_speed_ratings=_as_int(raw_meta.get("ISOSpeedRatings")),
            focal_length=_as_float(raw_meta.get("FocalLength")),
            flash=_as_int(raw_meta.get("Flash")),
            pixel_x_dimension=_as_int(raw_meta.get("ExifImageWidth")),
            pixel_y_dimension=_as_int(raw_meta.get("ExifImageHeight")),
            raw_metadata=raw_meta,
        )


class ImageMetadata(BaseModel):
    """Basic metadata of a decoded image."""

    size: ImageSize
    channels: int
    alpha: bool
    profile: bool
    orientation: int
    type: str
    space: str
    exif: ExifData = Field(default_factory=ExifData)


def _as_str(value: Any) -> str | None:
    if value is None:
        return None
    if isinstance(value, bytes):
        return value.decode(errors="replace").rstrip("\x00")
    return str(value)


def _as_int(value: Any) -> int | None:
    if value is None:
        return None
    try:
        return int(value)
    except (TypeError, ValueError):
        return None


def _as_float(value: Any) -> float | None:
    if value is None:
        return None
    try:
        return float(value)
    except (TypeError, ValueError, ZeroDivisionError):
        return None
