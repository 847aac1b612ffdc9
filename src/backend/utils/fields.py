"""2-D height field with physical geometry and real <-> pixel conversions."""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Optional

import numpy as np


@dataclass(eq=False)
class ImageField:
    """Scan data (rows x columns) plus its physical extent.

    ``x_real``/``y_real`` are the physical width/height of the whole field. Real
    coordinates used by the conversions are measured from the field origin, so the
    lateral offsets only matter for display.
    """

    data: np.ndarray
    x_real: float
    y_real: float
    x_offset: float = 0.0
    y_offset: float = 0.0
    si_unit_xy: str = "m"
    si_unit_z: str = "m"
    revision: int = field(default=0, compare=False)
    leveled_revision: Optional[int] = field(default=None, compare=False)

    def __post_init__(self) -> None:
        data = np.asarray(self.data, dtype=np.float64)
        if data.ndim != 2 or data.size == 0:
            raise ValueError(f"ImageField needs a non-empty 2-D array, got shape {data.shape}")
        if self.x_real <= 0 or self.y_real <= 0:
            raise ValueError("Physical dimensions must be positive")
        self.data = data

    @classmethod
    def from_pixels(cls, data: np.ndarray, pixel_size: float, **kwargs) -> "ImageField":
        """Build a field whose physical size is ``pixel_size`` per pixel."""
        arr = np.asarray(data, dtype=np.float64)
        return cls(arr, x_real=arr.shape[1] * pixel_size, y_real=arr.shape[0] * pixel_size, **kwargs)

    # ------------------------------------------------------------------
    # Geometry
    # ------------------------------------------------------------------
    @property
    def x_res(self) -> int:
        return int(self.data.shape[1])

    @property
    def y_res(self) -> int:
        return int(self.data.shape[0])

    @property
    def dx(self) -> float:
        return self.x_real / self.x_res

    @property
    def dy(self) -> float:
        return self.y_real / self.y_res

    def rtoj(self, x: float) -> float:
        """Physical x coordinate -> (fractional) column index."""
        return x * self.x_res / self.x_real

    def rtoi(self, y: float) -> float:
        """Physical y coordinate -> (fractional) row index."""
        return y * self.y_res / self.y_real

    def jtor(self, col: float) -> float:
        return col * self.x_real / self.x_res

    def itor(self, row: float) -> float:
        return row * self.y_real / self.y_res

    # ------------------------------------------------------------------
    # Copies
    # ------------------------------------------------------------------
    def duplicate(self) -> "ImageField":
        return ImageField(
            self.data.copy(),
            x_real=self.x_real,
            y_real=self.y_real,
            x_offset=self.x_offset,
            y_offset=self.y_offset,
            si_unit_xy=self.si_unit_xy,
            si_unit_z=self.si_unit_z,
        )

    def assign(self, other: "ImageField") -> None:
        """Copy data and geometry of ``other`` into this field, keeping its identity."""
        self.data = other.data.copy()
        self.x_real = other.x_real
        self.y_real = other.y_real
        self.x_offset = other.x_offset
        self.y_offset = other.y_offset
        self.si_unit_xy = other.si_unit_xy
        self.si_unit_z = other.si_unit_z
        self.data_changed()

    def data_changed(self) -> None:
        self.revision += 1

    @property
    def is_leveled(self) -> bool:
        """True while the data is unchanged since the last :meth:`mark_leveled`."""
        return self.leveled_revision == self.revision

    def mark_leveled(self) -> None:
        self.leveled_revision = self.revision

    def value_range(self) -> tuple[float, float]:
        return float(np.nanmin(self.data)), float(np.nanmax(self.data))

    def describe(self, title: Optional[str] = None) -> str:
        name = f"{title}: " if title else ""
        return (
            f"{name}{self.x_res}x{self.y_res} px, "
            f"{self.x_real:.3g}x{self.y_real:.3g} {self.si_unit_xy}"
        )
